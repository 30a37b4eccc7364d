"""Backend package for the monster group XP tooltip."""

from .bus import MapEventBus, Subscription
from .config import OverlaySettings, load_settings
from .engine import estimate_group, party_size_modifier, star_rating
from .errors import EstimationError, MalformedInputError, PartySizeOutOfRangeError
from .events import apply_map_event
from .models import Creature, MonsterGroup, PlayerContext, XpEstimate
from .overlay import TooltipOverlay
from .registry import GroupRegistry

__all__ = [
    "apply_map_event",
    "Creature",
    "estimate_group",
    "EstimationError",
    "GroupRegistry",
    "load_settings",
    "MalformedInputError",
    "MapEventBus",
    "MonsterGroup",
    "OverlaySettings",
    "party_size_modifier",
    "PartySizeOutOfRangeError",
    "PlayerContext",
    "star_rating",
    "Subscription",
    "TooltipOverlay",
    "XpEstimate",
]
