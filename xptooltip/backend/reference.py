"""Reference XP formula shipped with the game client.

It differs from :func:`xptooltip.backend.engine.estimate_group`: the level
window is applied to total levels, the party size table is clamped instead of
rejected, mount and guild percentages are taken off before the experience
factor and the player's share is capped by the strongest monster. It is kept
apart so both numbers can be compared; the primary pipeline is the one the
overlay shows.
"""

from __future__ import annotations

import math

from xptooltip.backend.engine import PARTY_SIZE_MODIFIERS, require_int, require_number
from xptooltip.backend.errors import MalformedInputError
from xptooltip.backend.models import MonsterGroup, PlayerContext

LEVEL_WINDOW = 5

_SIZE_TABLE = [PARTY_SIZE_MODIFIERS[size] for size in sorted(PARTY_SIZE_MODIFIERS)]


def group_coefficient(total_player_levels: int, total_mob_levels: int) -> float:
    if total_player_levels - LEVEL_WINDOW > total_mob_levels:
        return total_mob_levels / total_player_levels
    if total_player_levels + 2 * LEVEL_WINDOW < total_mob_levels:
        return (total_player_levels + 2 * LEVEL_WINDOW) / total_mob_levels
    return 1


def clamped_size_modifier(size: int) -> float:
    return _SIZE_TABLE[max(0, min(len(_SIZE_TABLE), size) - 1)]


def age_coefficient(age_bonus: float) -> float:
    if age_bonus <= 0:
        return 1
    return 1 + age_bonus / 100


def reference_xp(player: PlayerContext, group: MonsterGroup) -> int:
    player_level = require_int(player.player_level, "player_level")
    wisdom = require_number(player.wisdom, "wisdom")
    experience_factor = require_number(player.experience_factor, "experience_factor")
    mount_ratio = require_number(player.xp_ratio_mount, "xp_ratio_mount")
    guild_percent = require_number(player.xp_guild_given_percent, "xp_guild_given_percent")
    alliance_percent = require_number(player.xp_alliance_prism_bonus_percent, "xp_alliance_prism_bonus_percent")
    age_bonus = require_number(group.age_bonus, "age_bonus")
    if not group.members:
        raise MalformedInputError(f"Group {group.contextual_id} has no members")

    party_levels = [player_level] + [
        require_int(level, f"party_members[{index}]") for index, level in enumerate(player.party_members)
    ]
    total_party_levels = sum(party_levels)
    if total_party_levels <= 0:
        raise MalformedInputError(f"Total party level must be positive, got {total_party_levels}")
    low_level_threshold = math.floor(max(party_levels) / 3)
    party_size = sum(1 for level in party_levels if level >= low_level_threshold)

    total_mob_levels = 0
    highest_mob_level = 0
    pool = 0
    for index, creature in enumerate(group.members):
        level = require_int(creature.level, f"members[{index}].level")
        total_mob_levels += level
        highest_mob_level = max(highest_mob_level, level)
        pool += math.trunc(require_number(creature.base_xp, f"members[{index}].base_xp"))

    pool = math.trunc(pool * group_coefficient(total_party_levels, total_mob_levels))
    pool = math.trunc(pool * clamped_size_modifier(party_size))
    pool = math.trunc(pool * age_coefficient(age_bonus))
    if pool <= 0:
        return 0

    counted_level = min(player_level, math.trunc(2.5 * highest_mob_level))
    share = math.trunc(pool * counted_level / total_party_levels)
    share = math.trunc(share * wisdom / 100 + share)
    share = max(1, share)

    kept_percent = 100
    kept_percent -= kept_percent * mount_ratio / 100
    kept_percent -= kept_percent * guild_percent / 100
    kept_ratio = kept_percent / 100
    if alliance_percent > 0:
        share *= 1 + alliance_percent / 100
    share = math.trunc(share * kept_ratio) * (1 + experience_factor / 100)
    return math.trunc(share)
