"""FastAPI endpoints for host events, overlay toggling and websocket display sync."""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict, Field

from .config import OverlaySettings, load_settings
from .display import Viewport
from .engine import estimate_group
from .errors import EstimationError, MalformedInputError
from .overlay import TooltipOverlay
from .payloads import parse_map_event, parse_player
from .reference import reference_xp

log = logging.getLogger(__name__)


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OverlayStateResponse(ApiModel):
    state: dict[str, Any]


class CombatStateRequest(ApiModel):
    in_combat: bool = Field(alias="inCombat")


class ViewportRequest(ApiModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class KeyEventRequest(ApiModel):
    key: str = Field(min_length=1)
    type: Literal["keydown", "keyup"]


class GroupsResponse(ApiModel):
    groups: list[dict[str, Any]]


class EstimateResponse(ApiModel):
    group_id: int = Field(alias="groupId")
    group_level: int = Field(alias="groupLevel")
    yellow_stars: int = Field(alias="yellowStars")
    red_stars: int = Field(alias="redStars")
    solo_xp: int = Field(alias="soloXp")
    party_xp: int | None = Field(alias="partyXp")
    reference_xp: int = Field(alias="referenceXp")
    formulas_agree: bool = Field(alias="formulasAgree")


class OverlayWebSocketHub:
    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)

    async def send_state(self, websocket: WebSocket, state: dict[str, Any]) -> None:
        await websocket.send_json({"type": "overlay.full", "state": state})

    async def broadcast_state(self, state: dict[str, Any]) -> None:
        stale_connections: list[WebSocket] = []
        for websocket in list(self._connections):
            try:
                await self.send_state(websocket, state)
            except RuntimeError:
                stale_connections.append(websocket)
        for websocket in stale_connections:
            self.disconnect(websocket=websocket)


def _default_overlay(settings: OverlaySettings) -> TooltipOverlay:
    return TooltipOverlay(
        viewport=settings.viewport(),
        options=settings.display_options(),
        toggle_key=settings.toggle_key,
    )


def create_app(overlay: TooltipOverlay | None = None, settings: OverlaySettings | None = None) -> FastAPI:
    app = FastAPI(title="XP Tooltip API", version="0.1.0")
    local_settings = settings if settings is not None else load_settings()
    tooltip_overlay = overlay if overlay is not None else _default_overlay(local_settings)
    websocket_hub = OverlayWebSocketHub()
    app.state.overlay = tooltip_overlay
    app.state.websocket_hub = websocket_hub

    async def publish_state() -> OverlayStateResponse:
        state = tooltip_overlay.display_state()
        await websocket_hub.broadcast_state(state=state)
        return OverlayStateResponse(state=state)

    @app.post("/api/events", response_model=OverlayStateResponse)
    async def post_event(payload: dict[str, Any]) -> OverlayStateResponse:
        try:
            event = parse_map_event(payload)
        except MalformedInputError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        tooltip_overlay.handle_event(event)
        return await publish_state()

    @app.put("/api/player", response_model=OverlayStateResponse)
    async def put_player(payload: dict[str, Any]) -> OverlayStateResponse:
        try:
            tooltip_overlay.set_player(parse_player(payload))
        except MalformedInputError as exc:
            log.error("Rejected player context: %s", exc)
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return await publish_state()

    @app.put("/api/combat", response_model=OverlayStateResponse)
    async def put_combat(payload: CombatStateRequest) -> OverlayStateResponse:
        tooltip_overlay.set_in_combat(payload.in_combat)
        return await publish_state()

    @app.put("/api/viewport", response_model=OverlayStateResponse)
    async def put_viewport(payload: ViewportRequest) -> OverlayStateResponse:
        tooltip_overlay.set_viewport(Viewport(width=payload.width, height=payload.height))
        return await publish_state()

    @app.post("/api/overlay/activate", response_model=OverlayStateResponse)
    async def activate_overlay() -> OverlayStateResponse:
        tooltip_overlay.activate()
        return await publish_state()

    @app.post("/api/overlay/deactivate", response_model=OverlayStateResponse)
    async def deactivate_overlay() -> OverlayStateResponse:
        tooltip_overlay.deactivate()
        return await publish_state()

    @app.post("/api/overlay/key", response_model=OverlayStateResponse)
    async def post_key(payload: KeyEventRequest) -> OverlayStateResponse:
        tooltip_overlay.handle_key(payload.key, pressed=payload.type == "keydown")
        return await publish_state()

    @app.get("/api/overlay", response_model=OverlayStateResponse)
    def get_overlay() -> OverlayStateResponse:
        return OverlayStateResponse(state=tooltip_overlay.display_state())

    @app.get("/api/groups", response_model=GroupsResponse)
    def get_groups() -> GroupsResponse:
        groups = [
            {
                "id": group.contextual_id,
                "cellId": group.cell_id,
                "ageBonus": group.age_bonus,
                "members": [{"name": member.name, "level": member.level} for member in group.members],
            }
            for group in tooltip_overlay.registry
        ]
        return GroupsResponse(groups=groups)

    @app.get("/api/groups/{group_id}/estimate", response_model=EstimateResponse)
    def get_estimate(group_id: int) -> EstimateResponse:
        group = tooltip_overlay.registry.get(group_id)
        if group is None:
            raise HTTPException(status_code=404, detail="Group not visible")
        player = tooltip_overlay.player
        if player is None:
            raise HTTPException(status_code=409, detail="Player context not set")
        try:
            estimate = estimate_group(group, player)
            reference = reference_xp(player, group)
        except EstimationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        shown = estimate.party_xp if estimate.party_xp is not None else estimate.solo_xp
        if shown != reference:
            log.debug("Group %s: primary formula gives %s, reference formula %s", group_id, shown, reference)
        return EstimateResponse(
            group_id=group_id,
            group_level=estimate.group_level,
            yellow_stars=estimate.star_rating.yellow,
            red_stars=estimate.star_rating.red,
            solo_xp=estimate.solo_xp,
            party_xp=estimate.party_xp,
            reference_xp=reference,
            formulas_agree=shown == reference,
        )

    @app.websocket("/ws/overlay")
    async def overlay_ws(websocket: WebSocket) -> None:
        await websocket_hub.connect(websocket=websocket)
        await websocket_hub.send_state(websocket=websocket, state=tooltip_overlay.display_state())

        try:
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            websocket_hub.disconnect(websocket=websocket)

    return app


app = create_app()
