from datetime import datetime, timezone

import pytest

from xptooltip.backend.errors import MalformedInputError
from xptooltip.backend.events import ActorMoved, ActorRemoved, ActorShown, FightStarting, MapSnapshot
from xptooltip.backend.models import Creature
from xptooltip.backend.payloads import parse_actor, parse_map_event, parse_player
from xptooltip.backend.registry import MonsterGroupActor, OtherActor

NO_WISDOM = {"_base": 0, "_additionnal": 0, "_objectsAndMountBonus": 0}


def _creature(level: int, xp: int, name: str) -> dict:
    return {"staticInfos": {"level": level, "xp": xp, "nameId": name}}


def _monster_group(contextual_id: int = -20001, cell_id: int = 312) -> dict:
    return {
        "_type": "GameRolePlayGroupMonsterInformations",
        "contextualId": contextual_id,
        "disposition": {"cellId": cell_id, "direction": 3},
        "ageBonus": 40,
        "staticInfos": {
            "mainCreatureLightInfos": _creature(24, 310, "Bouftou Royal"),
            "underlings": [_creature(6, 48, "Bouftou"), _creature(4, 30, "Boufton Blanc")],
        },
    }


def test_parse_snapshot_builds_groups_and_other_actors() -> None:
    raw = {
        "type": "MapComplementaryInformationsDataMessage",
        "actors": [
            _monster_group(),
            {"_type": "GameRolePlayCharacterInformations", "contextualId": 123456, "name": "Someone"},
        ],
    }

    event = parse_map_event(raw)

    assert isinstance(event, MapSnapshot)
    group_actor, other_actor = event.actors
    assert isinstance(group_actor, MonsterGroupActor)
    assert group_actor.group.contextual_id == -20001
    assert group_actor.group.cell_id == 312
    assert group_actor.group.age_bonus == 40
    assert group_actor.group.main_creature == Creature(level=24, base_xp=310, name="Bouftou Royal")
    assert [creature.name for creature in group_actor.group.underlings] == ["Bouftou", "Boufton Blanc"]
    assert other_actor == OtherActor(contextual_id=123456, kind="GameRolePlayCharacterInformations")


def test_parse_movement_removal_show_and_fight_messages() -> None:
    moved = parse_map_event({"type": "GameMapMovementMessage", "actorId": -20001, "keyMovements": [312, 326]})
    removed = parse_map_event({"type": "GameContextRemoveElementMessage", "id": -20001})
    shown = parse_map_event({"type": "GameRolePlayShowActorMessage", "informations": _monster_group(-20002)})
    fight = parse_map_event({"type": "GameFightStartingMessage"})

    assert moved == ActorMoved(actor_id=-20001, key_movements=(312, 326))
    assert removed == ActorRemoved(actor_id=-20001)
    assert isinstance(shown, ActorShown)
    assert shown.actor.contextual_id == -20002
    assert fight == FightStarting()


def test_parse_actor_without_group_details_is_other_kind() -> None:
    actor = parse_actor({"_type": "GameRolePlayNpcInformations", "contextualId": -3})

    assert actor == OtherActor(contextual_id=-3, kind="GameRolePlayNpcInformations")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda raw: raw.pop("ageBonus"),
        lambda raw: raw["disposition"].pop("cellId"),
        lambda raw: raw["staticInfos"]["mainCreatureLightInfos"]["staticInfos"].update(xp="310"),
        lambda raw: raw["staticInfos"]["underlings"][0]["staticInfos"].update(level=None),
        lambda raw: raw["staticInfos"]["underlings"][1]["staticInfos"].update(level=True),
    ],
)
def test_parse_actor_rejects_malformed_monster_group(mutate) -> None:
    raw = _monster_group()
    mutate(raw)

    with pytest.raises(MalformedInputError):
        parse_actor(raw)


def test_parse_map_event_rejects_unknown_message_type() -> None:
    with pytest.raises(MalformedInputError):
        parse_map_event({"type": "ChatServerMessage", "content": "hello"})


def test_parse_player_sums_wisdom_components_and_party_levels() -> None:
    player = parse_player(
        {
            "level": 180,
            "wisdom": {"_base": 101, "_additionnal": 50, "_objectsAndMountBonus": -11, "_contextModif": 7},
            "experienceFactor": 25,
            "partyMemberLevels": [150, 60],
        }
    )

    assert player.player_level == 180
    assert player.wisdom == 140
    assert player.experience_factor == 25
    assert player.party_members == (150, 60)
    assert player.bonus_pack_active is False


def test_parse_player_derives_bonus_pack_from_subscription_end_date() -> None:
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    now_ms = now.timestamp() * 1000
    base = {"level": 50, "wisdom": NO_WISDOM, "experienceFactor": 0}

    active = parse_player({**base, "subscriptionEndDate": now_ms + 60_000}, now=now)
    expired = parse_player({**base, "subscriptionEndDate": now_ms - 60_000}, now=now)

    assert active.bonus_pack_active is True
    assert expired.bonus_pack_active is False


@pytest.mark.parametrize(
    "raw",
    [
        {"wisdom": NO_WISDOM, "experienceFactor": 0},
        {"level": 0, "wisdom": NO_WISDOM, "experienceFactor": 0},
        {"level": "50", "wisdom": NO_WISDOM, "experienceFactor": 0},
        {"level": 50, "wisdom": {**NO_WISDOM, "_base": "10"}, "experienceFactor": 0},
        {"level": 50, "wisdom": NO_WISDOM},
        {"level": 50, "wisdom": {}, "experienceFactor": 0},
        {"level": 50, "wisdom": {"_base": 50, "_additionnal": 20}, "experienceFactor": 0},
        {"level": 50, "wisdom": {"base": 50, "additional": 20, "objectsAndMountBonus": 30}, "experienceFactor": 0},
    ],
)
def test_parse_player_rejects_malformed_payload(raw: dict) -> None:
    with pytest.raises(MalformedInputError):
        parse_player(raw)


def test_parse_actor_requires_creature_name() -> None:
    raw = _monster_group()
    del raw["staticInfos"]["underlings"][0]["staticInfos"]["nameId"]

    with pytest.raises(MalformedInputError):
        parse_actor(raw)
