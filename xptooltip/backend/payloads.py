"""Validation of host message payloads into domain events and player context."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    Tag,
    TypeAdapter,
    ValidationError,
)

from xptooltip.backend.errors import MalformedInputError
from xptooltip.backend.events import ActorMoved, ActorRemoved, ActorShown, FightStarting, MapEvent, MapSnapshot
from xptooltip.backend.models import Creature, MonsterGroup, PlayerContext
from xptooltip.backend.registry import Actor, MonsterGroupActor, OtherActor

MONSTER_GROUP_TYPE = "GameRolePlayGroupMonsterInformations"


class HostModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CreatureStaticInfos(HostModel):
    level: StrictInt
    xp: StrictFloat
    name_id: StrictStr = Field(alias="nameId")


class CreatureLightInfos(HostModel):
    static_infos: CreatureStaticInfos = Field(alias="staticInfos")

    def to_domain(self) -> Creature:
        infos = self.static_infos
        return Creature(level=infos.level, base_xp=infos.xp, name=infos.name_id)


class GroupStaticInfos(HostModel):
    main_creature: CreatureLightInfos = Field(alias="mainCreatureLightInfos")
    underlings: list[CreatureLightInfos] = Field(default_factory=list)


class Disposition(HostModel):
    cell_id: StrictInt = Field(alias="cellId")


class MonsterGroupPayload(HostModel):
    type: Literal["GameRolePlayGroupMonsterInformations"] = Field(alias="_type")
    contextual_id: StrictInt = Field(alias="contextualId")
    disposition: Disposition
    age_bonus: StrictInt = Field(alias="ageBonus")
    static_infos: GroupStaticInfos = Field(alias="staticInfos")

    def to_domain(self) -> MonsterGroupActor:
        members = [self.static_infos.main_creature, *self.static_infos.underlings]
        group = MonsterGroup(
            contextual_id=self.contextual_id,
            cell_id=self.disposition.cell_id,
            age_bonus=self.age_bonus,
            members=tuple(member.to_domain() for member in members),
        )
        return MonsterGroupActor(group=group)


class OtherActorPayload(HostModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    type: StrictStr = Field(alias="_type")
    contextual_id: StrictInt = Field(alias="contextualId")

    def to_domain(self) -> OtherActor:
        return OtherActor(contextual_id=self.contextual_id, kind=self.type)


def _actor_kind(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("_type", value.get("type"))
    else:
        kind = getattr(value, "type", None)
    return "monster_group" if kind == MONSTER_GROUP_TYPE else "other"


ActorPayload = Annotated[
    Union[
        Annotated[MonsterGroupPayload, Tag("monster_group")],
        Annotated[OtherActorPayload, Tag("other")],
    ],
    Discriminator(_actor_kind),
]


class MapComplementaryInformationsDataMessage(HostModel):
    type: Literal["MapComplementaryInformationsDataMessage"]
    actors: list[ActorPayload]

    def to_event(self) -> MapSnapshot:
        return MapSnapshot(actors=tuple(actor.to_domain() for actor in self.actors))


class GameMapMovementMessage(HostModel):
    type: Literal["GameMapMovementMessage"]
    actor_id: StrictInt = Field(alias="actorId")
    key_movements: list[StrictInt] = Field(alias="keyMovements")

    def to_event(self) -> ActorMoved:
        return ActorMoved(actor_id=self.actor_id, key_movements=tuple(self.key_movements))


class GameContextRemoveElementMessage(HostModel):
    type: Literal["GameContextRemoveElementMessage"]
    id: StrictInt

    def to_event(self) -> ActorRemoved:
        return ActorRemoved(actor_id=self.id)


class GameRolePlayShowActorMessage(HostModel):
    type: Literal["GameRolePlayShowActorMessage"]
    informations: ActorPayload

    def to_event(self) -> ActorShown:
        return ActorShown(actor=self.informations.to_domain())


class GameFightStartingMessage(HostModel):
    type: Literal["GameFightStartingMessage"]

    def to_event(self) -> FightStarting:
        return FightStarting()


HostMessage = Annotated[
    Union[
        MapComplementaryInformationsDataMessage,
        GameMapMovementMessage,
        GameContextRemoveElementMessage,
        GameRolePlayShowActorMessage,
        GameFightStartingMessage,
    ],
    Field(discriminator="type"),
]

_HOST_MESSAGE_ADAPTER: TypeAdapter[Any] = TypeAdapter(HostMessage)
_ACTOR_ADAPTER: TypeAdapter[Any] = TypeAdapter(ActorPayload)


def parse_map_event(raw: dict[str, Any]) -> MapEvent:
    try:
        message = _HOST_MESSAGE_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid host message: {exc}") from exc
    return message.to_event()


def parse_actor(raw: dict[str, Any]) -> Actor:
    try:
        payload = _ACTOR_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid actor payload: {exc}") from exc
    return payload.to_domain()


class WisdomPayload(HostModel):
    """The host's wisdom characteristic; every component is required."""

    base: StrictInt = Field(alias="_base")
    additional: StrictInt = Field(alias="_additionnal")
    objects_and_mount_bonus: StrictInt = Field(alias="_objectsAndMountBonus")

    @property
    def total(self) -> int:
        return self.base + self.additional + self.objects_and_mount_bonus


class PlayerPayload(HostModel):
    level: StrictInt = Field(gt=0)
    wisdom: WisdomPayload
    experience_factor: StrictFloat = Field(alias="experienceFactor")
    party_member_levels: list[StrictInt] = Field(default_factory=list, alias="partyMemberLevels")
    subscription_end_date: StrictFloat | None = Field(default=None, alias="subscriptionEndDate")
    bonus_pack_active: StrictBool | None = Field(default=None, alias="bonusPackActive")
    xp_ratio_mount: StrictFloat = Field(default=0, alias="xpRatioMount")
    xp_guild_given_percent: StrictFloat = Field(default=0, alias="xpGuildGivenPercent")
    xp_alliance_prism_bonus_percent: StrictFloat = Field(default=0, alias="xpAlliancePrismBonusPercent")

    def to_domain(self, now: datetime | None = None) -> PlayerContext:
        return PlayerContext(
            player_level=self.level,
            wisdom=self.wisdom.total,
            experience_factor=self.experience_factor,
            party_members=tuple(self.party_member_levels),
            bonus_pack_active=self._bonus_pack_active(now),
            xp_ratio_mount=self.xp_ratio_mount,
            xp_guild_given_percent=self.xp_guild_given_percent,
            xp_alliance_prism_bonus_percent=self.xp_alliance_prism_bonus_percent,
        )

    def _bonus_pack_active(self, now: datetime | None) -> bool:
        if self.bonus_pack_active is not None:
            return self.bonus_pack_active
        if self.subscription_end_date is None:
            return False
        current = now if now is not None else datetime.now(timezone.utc)
        return self.subscription_end_date > current.timestamp() * 1000


def parse_player(raw: dict[str, Any], now: datetime | None = None) -> PlayerContext:
    try:
        payload = PlayerPayload.model_validate(raw)
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid player payload: {exc}") from exc
    return payload.to_domain(now=now)
