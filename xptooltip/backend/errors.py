"""Faults raised while turning host data into XP estimates."""


class EstimationError(Exception):
    """Raised when an XP estimate cannot be produced."""


class MalformedInputError(EstimationError):
    """Raised when a required player or creature field is missing or not a number."""


class PartySizeOutOfRangeError(EstimationError):
    """Raised when a party size has no entry in the party size modifier table."""
