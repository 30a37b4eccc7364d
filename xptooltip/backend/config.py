"""Configuration helpers for the overlay backend runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass

from xptooltip.backend.display import DisplayOptions, Viewport


@dataclass(frozen=True)
class OverlaySettings:
    host: str
    port: int
    toggle_key: str
    margin: float
    lift: float
    viewport_width: float
    viewport_height: float
    thousands_separator: str
    log_level: str

    def display_options(self) -> DisplayOptions:
        return DisplayOptions(thousands_separator=self.thousands_separator, margin=self.margin, lift=self.lift)

    def viewport(self) -> Viewport:
        return Viewport(width=self.viewport_width, height=self.viewport_height)


def load_settings() -> OverlaySettings:
    return OverlaySettings(
        host=os.getenv("XPTOOLTIP_HOST", "127.0.0.1"),
        port=int(os.getenv("XPTOOLTIP_PORT", "8000")),
        toggle_key=os.getenv("XPTOOLTIP_TOGGLE_KEY", "z"),
        margin=float(os.getenv("XPTOOLTIP_MARGIN", "10")),
        lift=float(os.getenv("XPTOOLTIP_LIFT", "40")),
        viewport_width=float(os.getenv("XPTOOLTIP_VIEWPORT_WIDTH", "1280")),
        viewport_height=float(os.getenv("XPTOOLTIP_VIEWPORT_HEIGHT", "720")),
        thousands_separator=os.getenv("XPTOOLTIP_THOUSANDS_SEPARATOR", " "),
        log_level=os.getenv("XPTOOLTIP_LOG_LEVEL", "INFO").upper(),
    )
