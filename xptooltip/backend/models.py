"""Domain records for visible monster groups, player context and estimates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Creature:
    level: int
    base_xp: float
    name: str


@dataclass(frozen=True)
class MonsterGroup:
    """A cluster of hostile creatures standing on one map cell.

    ``members[0]`` is the main creature, the rest are its underlings.
    """

    contextual_id: int
    cell_id: int
    age_bonus: int
    members: tuple[Creature, ...]

    @property
    def main_creature(self) -> Creature:
        return self.members[0]

    @property
    def underlings(self) -> tuple[Creature, ...]:
        return self.members[1:]


@dataclass(frozen=True)
class PlayerContext:
    player_level: int
    wisdom: int
    experience_factor: float
    party_members: tuple[int, ...] = ()
    bonus_pack_active: bool = False
    xp_ratio_mount: float = 0
    xp_guild_given_percent: float = 0
    xp_alliance_prism_bonus_percent: float = 0

    @property
    def in_party(self) -> bool:
        return len(self.party_members) > 0


@dataclass(frozen=True)
class StarRating:
    yellow: int
    red: int


@dataclass(frozen=True)
class XpEstimate:
    group_level: int
    star_rating: StarRating
    solo_xp: int
    party_xp: int | None


@dataclass(frozen=True)
class TooltipMember:
    name: str
    level: int


@dataclass(frozen=True)
class TooltipRecord:
    id: int
    group_level: int
    yellow_stars: int
    red_stars: int
    solo_xp_formatted: str
    party_xp_formatted: str | None
    bonus_pack_active: bool
    members: tuple[TooltipMember, ...] = field(default_factory=tuple)
    screen_x: float = 0
    screen_y: float = 0

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "groupLevel": self.group_level,
            "yellowStars": self.yellow_stars,
            "redStars": self.red_stars,
            "soloXpFormatted": self.solo_xp_formatted,
            "bonusPackActive": self.bonus_pack_active,
            "members": [{"name": member.name, "level": member.level} for member in self.members],
            "screenX": self.screen_x,
            "screenY": self.screen_y,
        }
        if self.party_xp_formatted is not None:
            payload["partyXpFormatted"] = self.party_xp_formatted
        return payload
