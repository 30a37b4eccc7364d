"""XP estimation for a monster group, solo and in a party.

The numbers must match what the game server awards, so every stage of the
pipeline truncates at exactly the point the server does. Do not fold the
stages into a single expression.
"""

from __future__ import annotations

import math
from typing import Any

from xptooltip.backend.errors import MalformedInputError, PartySizeOutOfRangeError
from xptooltip.backend.models import MonsterGroup, PlayerContext, StarRating, XpEstimate

PARTY_SIZE_MODIFIERS: dict[int, float] = {
    1: 1,
    2: 1.1,
    3: 1.5,
    4: 2.3,
    5: 3.1,
    6: 3.6,
    7: 4.2,
    8: 4.7,
}

MAX_STARS = 10
STARS_PER_TIER = 5
AGE_BONUS_PER_STAR = 20


def round_half_up(value: float) -> int:
    """Round like the game client does: halves go towards positive infinity."""
    return math.floor(value + 0.5)


def party_size_modifier(size: int) -> float:
    try:
        return PARTY_SIZE_MODIFIERS[size]
    except KeyError:
        raise PartySizeOutOfRangeError(f"No party size modifier for {size} members") from None


def star_rating(age_bonus: int) -> StarRating:
    raw = min(max(round_half_up(age_bonus / AGE_BONUS_PER_STAR), 0), MAX_STARS)
    red = max(raw - STARS_PER_TIER, 0)
    yellow = min(raw, STARS_PER_TIER) - red
    return StarRating(yellow=yellow, red=red)


def level_modifier(group_level: int, party_level: int, highest_monster_level: int) -> float:
    if group_level > party_level + 10:
        return (party_level + 10) / group_level
    if party_level > group_level + 5:
        return group_level / party_level
    if party_level > highest_monster_level * 2.5:
        return math.floor(highest_monster_level * 2.5) / party_level
    return 1


def effective_party_size(levels: list[int]) -> int:
    """Count party members whose level is at least a third of the highest level."""
    highest = max(levels)
    return sum(1 for level in levels if level * 3 >= highest)


def estimate_xp(
    *,
    total_mob_xp: float,
    group_level: int,
    highest_monster_level: int,
    age_bonus: int,
    player_level: int,
    party_level: int,
    wisdom: int,
    experience_factor: float,
    size_modifier: float = 1,
) -> int:
    modifier = level_modifier(group_level, party_level, highest_monster_level)
    stage1 = math.trunc(total_mob_xp * modifier)
    stage2 = math.trunc(stage1 * (1 + age_bonus / 100))
    stage3 = math.trunc(stage2 * (1 + wisdom / 100))
    stage4 = round_half_up(stage3 * (player_level / party_level))
    stage5 = math.trunc(stage4 * size_modifier)
    result = math.trunc(stage5 * (1 + experience_factor / 100))
    return max(result, 0)


def estimate_group(group: MonsterGroup, player: PlayerContext) -> XpEstimate:
    """Estimate solo and party XP for one group.

    ``party_xp`` is ``None`` when the player is not in a party; a computed
    value of 0 is a real result.
    """
    validate_player(player)
    player_level = player.player_level
    age_bonus = require_number(group.age_bonus, "age_bonus")
    if not group.members:
        raise MalformedInputError(f"Group {group.contextual_id} has no members")

    levels: list[int] = []
    total_mob_xp = 0.0
    for index, creature in enumerate(group.members):
        level = require_int(creature.level, f"members[{index}].level")
        if level < 0:
            raise MalformedInputError(f"members[{index}].level must not be negative, got {level}")
        levels.append(level)
        total_mob_xp += require_number(creature.base_xp, f"members[{index}].base_xp")

    group_level = sum(levels)
    highest_monster_level = max(levels)
    common = {
        "total_mob_xp": total_mob_xp,
        "group_level": group_level,
        "highest_monster_level": highest_monster_level,
        "age_bonus": age_bonus,
        "player_level": player_level,
        "wisdom": player.wisdom,
        "experience_factor": player.experience_factor,
    }

    solo_xp = estimate_xp(party_level=player_level, **common)

    party_xp: int | None = None
    if player.party_members:
        party_levels = [player_level, *player.party_members]
        party_xp = estimate_xp(
            party_level=sum(party_levels),
            size_modifier=party_size_modifier(effective_party_size(party_levels)),
            **common,
        )

    return XpEstimate(
        group_level=group_level,
        star_rating=star_rating(age_bonus),
        solo_xp=solo_xp,
        party_xp=party_xp,
    )


def validate_player(player: PlayerContext) -> None:
    """Reject a player context the estimate cannot be computed from."""
    player_level = require_int(player.player_level, "player_level")
    if player_level <= 0:
        raise MalformedInputError(f"player_level must be positive, got {player_level}")
    require_number(player.wisdom, "wisdom")
    require_number(player.experience_factor, "experience_factor")
    for index, member_level in enumerate(player.party_members):
        if require_int(member_level, f"party_members[{index}]") <= 0:
            raise MalformedInputError(f"party_members[{index}] must be positive, got {member_level}")


def require_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInputError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise MalformedInputError(f"{name} must be finite, got {value!r}")
    return value


def require_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"{name} must be an integer, got {value!r}")
    return value
