import pytest

from xptooltip.backend.events import (
    ActorMoved,
    ActorRemoved,
    ActorShown,
    EventOutcome,
    FightStarting,
    MapSnapshot,
    apply_map_event,
    replay,
)
from xptooltip.backend.models import Creature, MonsterGroup
from xptooltip.backend.registry import GroupRegistry, MonsterGroupActor, OtherActor


def _actor(contextual_id: int, cell_id: int = 100) -> MonsterGroupActor:
    group = MonsterGroup(
        contextual_id=contextual_id,
        cell_id=cell_id,
        age_bonus=20,
        members=(Creature(level=12, base_xp=80, name="Arakne"),),
    )
    return MonsterGroupActor(group=group)


def test_snapshot_keeps_only_monster_groups() -> None:
    registry = GroupRegistry()
    event = MapSnapshot(actors=(_actor(-1), OtherActor(contextual_id=5, kind="GameRolePlayNpcInformations"), _actor(-2)))

    outcome = apply_map_event(registry, event)

    assert outcome == EventOutcome(changed=True)
    assert [group.contextual_id for group in registry] == [-1, -2]


def test_move_uses_last_key_movement() -> None:
    registry = GroupRegistry()
    apply_map_event(registry, MapSnapshot(actors=(_actor(-1, cell_id=100),)))

    outcome = apply_map_event(registry, ActorMoved(actor_id=-1, key_movements=(100, 114, 128)))

    assert outcome.changed is True
    assert registry.get(-1).cell_id == 128


def test_move_with_empty_path_is_a_no_op() -> None:
    registry = GroupRegistry()
    apply_map_event(registry, MapSnapshot(actors=(_actor(-1, cell_id=100),)))

    outcome = apply_map_event(registry, ActorMoved(actor_id=-1, key_movements=()))

    assert outcome.changed is False
    assert registry.get(-1).cell_id == 100


def test_events_for_other_actors_do_not_change_registry() -> None:
    registry = GroupRegistry()
    apply_map_event(registry, MapSnapshot(actors=(_actor(-1),)))

    moved = apply_map_event(registry, ActorMoved(actor_id=9001, key_movements=(10, 24)))
    removed = apply_map_event(registry, ActorRemoved(actor_id=9001))
    shown = apply_map_event(registry, ActorShown(actor=OtherActor(contextual_id=9002, kind="GameRolePlayCharacterInformations")))

    assert (moved.changed, removed.changed, shown.changed) == (False, False, False)
    assert [group.contextual_id for group in registry] == [-1]


def test_fight_starting_forces_hide_without_touching_registry() -> None:
    registry = GroupRegistry()
    apply_map_event(registry, MapSnapshot(actors=(_actor(-1),)))

    outcome = apply_map_event(registry, FightStarting())

    assert outcome == EventOutcome(changed=False, force_hide=True)
    assert len(registry) == 1


def test_unknown_event_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        apply_map_event(GroupRegistry(), object())


def test_replay_is_deterministic_left_fold() -> None:
    events = [
        MapSnapshot(actors=(_actor(-1, 10), _actor(-2, 20))),
        ActorShown(actor=_actor(-3, 30)),
        ActorMoved(actor_id=-2, key_movements=(20, 34)),
        ActorRemoved(actor_id=-1),
        ActorMoved(actor_id=77, key_movements=(1,)),
        ActorRemoved(actor_id=77),
        ActorShown(actor=_actor(-4, 40)),
        ActorMoved(actor_id=-4, key_movements=(40, 54, 68)),
    ]

    first = replay(events)
    second = replay(events)

    folded = GroupRegistry()
    for event in events:
        apply_map_event(folded, event)

    assert first.groups() == second.groups() == folded.groups()
    assert [(group.contextual_id, group.cell_id) for group in first] == [(-2, 34), (-3, 30), (-4, 68)]


def test_snapshot_after_other_events_discards_prior_state() -> None:
    registry = replay(
        [
            MapSnapshot(actors=(_actor(-1),)),
            ActorShown(actor=_actor(-2)),
            MapSnapshot(actors=(_actor(-9, 99),)),
        ]
    )

    assert [(group.contextual_id, group.cell_id) for group in registry] == [(-9, 99)]
