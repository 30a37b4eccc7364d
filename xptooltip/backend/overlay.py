"""Tooltip overlay controller: registry, toggle state and display records."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
from typing import Any, Iterator

from xptooltip.backend.bus import MapEventBus, Subscription
from xptooltip.backend.display import CellProjector, DisplayOptions, IsoGridProjector, Viewport, build_tooltip_record
from xptooltip.backend.engine import validate_player
from xptooltip.backend.errors import EstimationError
from xptooltip.backend.events import EventOutcome, MapEvent, apply_map_event
from xptooltip.backend.models import PlayerContext, TooltipRecord
from xptooltip.backend.registry import GroupRegistry

log = logging.getLogger(__name__)


@dataclass
class TooltipOverlay:
    """Keeps the tooltip display in sync with the map.

    The display is rebuilt from scratch on every change while it is shown.
    It can only be shown outside of combat and once a player context is known.
    """

    projector: CellProjector = field(default_factory=IsoGridProjector)
    viewport: Viewport = field(default_factory=lambda: Viewport(width=1280, height=720))
    options: DisplayOptions = field(default_factory=DisplayOptions)
    toggle_key: str = "z"
    registry: GroupRegistry = field(default_factory=GroupRegistry)

    def __post_init__(self) -> None:
        self.player: PlayerContext | None = None
        self.visible = False
        self.in_combat = False
        self._tooltips: list[TooltipRecord] = []

    @property
    def tooltips(self) -> list[TooltipRecord]:
        return list(self._tooltips)

    def handle_event(self, event: MapEvent) -> EventOutcome:
        outcome = apply_map_event(self.registry, event)
        if outcome.force_hide:
            self.in_combat = True
            self.hide()
        elif outcome.changed:
            self.refresh()
        return outcome

    def set_player(self, player: PlayerContext) -> None:
        validate_player(player)
        self.player = player
        self.refresh()

    def set_in_combat(self, in_combat: bool) -> None:
        self.in_combat = in_combat
        if in_combat:
            self.hide()

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewport = viewport
        self.refresh()

    def activate(self) -> bool:
        if self.visible or self.in_combat:
            return False
        if self.player is None:
            log.info("Overlay activation ignored: no player context yet")
            return False
        self._tooltips = self._build_tooltips(self.player)
        self.visible = True
        log.info("Overlay shown with %d tooltips", len(self._tooltips))
        return True

    def deactivate(self) -> bool:
        return self.hide()

    def hide(self) -> bool:
        if not self.visible:
            return False
        self._tooltips = []
        self.visible = False
        log.info("Overlay hidden")
        return True

    def refresh(self) -> bool:
        if not self.visible or self.player is None:
            return False
        self._tooltips = self._build_tooltips(self.player)
        return True

    def handle_key(self, key: str, pressed: bool) -> bool:
        if key != self.toggle_key:
            return False
        if pressed:
            return self.activate()
        return self.deactivate()

    @contextmanager
    def attached(self, bus: MapEventBus) -> Iterator[Subscription]:
        subscription = bus.subscribe(self.handle_event)
        try:
            yield subscription
        finally:
            subscription.release()
            self.hide()

    def display_state(self) -> dict[str, Any]:
        return {
            "visible": self.visible,
            "inCombat": self.in_combat,
            "tooltips": [record.to_payload() for record in self._tooltips],
        }

    def _build_tooltips(self, player: PlayerContext) -> list[TooltipRecord]:
        records: list[TooltipRecord] = []
        for group in self.registry:
            try:
                record = build_tooltip_record(group, player, self.projector, self.viewport, self.options)
            except EstimationError as exc:
                log.error("Skipping tooltip for group %s: %s", group.contextual_id, exc)
                continue
            records.append(record)
        return records
