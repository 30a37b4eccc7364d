"""Display records for the tooltip renderer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol

from xptooltip.backend.engine import estimate_group
from xptooltip.backend.models import MonsterGroup, PlayerContext, TooltipMember, TooltipRecord

MAP_WIDTH = 14
CELL_WIDTH = 86
CELL_HEIGHT = 43

BOX_WIDTH = 220
BOX_HEADER_HEIGHT = 48
BOX_LINE_HEIGHT = 18


class CellProjector(Protocol):
    def cell_to_pixel(self, cell_id: int) -> tuple[float, float]:
        """Return the on-screen pixel position of the centre of a map cell."""


@dataclass(frozen=True)
class IsoGridProjector:
    """Projects cells of the isometric map grid to canvas pixels.

    Rows are half a cell high and odd rows are shifted right by half a cell.
    """

    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def cell_to_pixel(self, cell_id: int) -> tuple[float, float]:
        row, column = divmod(cell_id, MAP_WIDTH)
        scene_x = column * CELL_WIDTH + (row % 2) * (CELL_WIDTH / 2) + CELL_WIDTH / 2
        scene_y = row * (CELL_HEIGHT / 2) + CELL_HEIGHT / 2
        return self.offset_x + scene_x * self.scale, self.offset_y + scene_y * self.scale


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float


@dataclass(frozen=True)
class DisplayOptions:
    thousands_separator: str = " "
    margin: float = 10
    lift: float = 40


def format_xp(value: int, separator: str = " ") -> str:
    return f"{value:,}".replace(",", separator)


def estimate_box_size(record: TooltipRecord) -> tuple[float, float]:
    lines = 1 + len(record.members)
    if record.party_xp_formatted is not None:
        lines += 1
    return BOX_WIDTH, BOX_HEADER_HEIGHT + lines * BOX_LINE_HEIGHT


def place_box(
    anchor: tuple[float, float],
    box: tuple[float, float],
    viewport: Viewport,
    margin: float = 10,
    lift: float = 40,
) -> tuple[float, float]:
    """Centre the box above its anchor, then keep it inside the viewport."""
    box_width, box_height = box
    x = anchor[0] - box_width / 2
    y = anchor[1] - (box_height + lift)

    if x < margin:
        x = margin
    if y < margin:
        y = margin

    max_x = viewport.width - box_width - margin
    if x > max_x:
        x = max_x
    max_y = viewport.height - box_height - margin
    if y > max_y:
        y = max_y
    return x, y


def build_tooltip_record(
    group: MonsterGroup,
    player: PlayerContext,
    projector: CellProjector,
    viewport: Viewport,
    options: DisplayOptions | None = None,
) -> TooltipRecord:
    opts = options if options is not None else DisplayOptions()
    estimate = estimate_group(group, player)
    party_xp = None if estimate.party_xp is None else format_xp(estimate.party_xp, opts.thousands_separator)
    record = TooltipRecord(
        id=group.contextual_id,
        group_level=estimate.group_level,
        yellow_stars=estimate.star_rating.yellow,
        red_stars=estimate.star_rating.red,
        solo_xp_formatted=format_xp(estimate.solo_xp, opts.thousands_separator),
        party_xp_formatted=party_xp,
        bonus_pack_active=player.bonus_pack_active,
        members=tuple(TooltipMember(name=creature.name, level=creature.level) for creature in group.members),
    )
    screen_x, screen_y = place_box(
        anchor=projector.cell_to_pixel(group.cell_id),
        box=estimate_box_size(record),
        viewport=viewport,
        margin=opts.margin,
        lift=opts.lift,
    )
    return replace(record, screen_x=screen_x, screen_y=screen_y)
