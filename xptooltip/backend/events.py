"""Map events delivered by the host and the reducer that applies them to the registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from xptooltip.backend.registry import Actor, GroupRegistry, MonsterGroupActor


@dataclass(frozen=True)
class MapSnapshot:
    actors: tuple[Actor, ...]


@dataclass(frozen=True)
class ActorMoved:
    actor_id: int
    key_movements: tuple[int, ...]


@dataclass(frozen=True)
class ActorRemoved:
    actor_id: int


@dataclass(frozen=True)
class ActorShown:
    actor: Actor


@dataclass(frozen=True)
class FightStarting:
    pass


MapEvent = Union[MapSnapshot, ActorMoved, ActorRemoved, ActorShown, FightStarting]


@dataclass(frozen=True)
class EventOutcome:
    changed: bool
    force_hide: bool = False


def apply_map_event(registry: GroupRegistry, event: MapEvent) -> EventOutcome:
    """Apply one host event to the registry and report what the display must do."""
    if isinstance(event, MapSnapshot):
        groups = [actor.group for actor in event.actors if isinstance(actor, MonsterGroupActor)]
        return EventOutcome(changed=registry.load_snapshot(groups))
    if isinstance(event, ActorMoved):
        if not event.key_movements:
            return EventOutcome(changed=False)
        return EventOutcome(changed=registry.move(event.actor_id, event.key_movements[-1]))
    if isinstance(event, ActorRemoved):
        return EventOutcome(changed=registry.remove(event.actor_id))
    if isinstance(event, ActorShown):
        return EventOutcome(changed=registry.appear(event.actor))
    if isinstance(event, FightStarting):
        return EventOutcome(changed=False, force_hide=True)
    raise TypeError(f"Unsupported map event: {type(event).__name__}")


def replay(events: list[MapEvent], registry: GroupRegistry | None = None) -> GroupRegistry:
    """Fold events left to right into a registry, starting from an empty one."""
    target = registry if registry is not None else GroupRegistry()
    for event in events:
        apply_map_event(target, event)
    return target
