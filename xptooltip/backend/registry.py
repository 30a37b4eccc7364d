"""In-memory registry of the monster groups currently visible on the map."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Iterable, Iterator, Union

from xptooltip.backend.models import MonsterGroup

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonsterGroupActor:
    group: MonsterGroup

    @property
    def contextual_id(self) -> int:
        return self.group.contextual_id


@dataclass(frozen=True)
class OtherActor:
    """Any map actor that is not a monster group (players, NPCs, merchants...)."""

    contextual_id: int
    kind: str


Actor = Union[MonsterGroupActor, OtherActor]


@dataclass(eq=False)
class GroupRegistry:
    """Ordered collection of visible groups keyed by contextual id.

    Every mutator returns ``True`` when the visible set changed so the caller
    knows the display is stale. Ids are assumed unique: ``appear`` does not
    de-duplicate, a repeated id means the event source is broken.
    """

    def __post_init__(self) -> None:
        self._groups: list[MonsterGroup] = []

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[MonsterGroup]:
        return iter(list(self._groups))

    def groups(self) -> list[MonsterGroup]:
        return list(self._groups)

    def get(self, contextual_id: int) -> MonsterGroup | None:
        index = self._index_of(contextual_id)
        if index is None:
            return None
        return self._groups[index]

    def load_snapshot(self, groups: Iterable[MonsterGroup]) -> bool:
        self._groups = list(groups)
        log.debug("Loaded map snapshot with %d monster groups", len(self._groups))
        return True

    def move(self, contextual_id: int, new_cell_id: int) -> bool:
        index = self._index_of(contextual_id)
        if index is None:
            return False
        self._groups[index] = replace(self._groups[index], cell_id=new_cell_id)
        log.debug("Group %s moved to cell %s", contextual_id, new_cell_id)
        return True

    def remove(self, contextual_id: int) -> bool:
        index = self._index_of(contextual_id)
        if index is None:
            return False
        del self._groups[index]
        log.debug("Group %s left the map", contextual_id)
        return True

    def appear(self, actor: Actor) -> bool:
        if isinstance(actor, MonsterGroupActor):
            self._groups.append(actor.group)
            log.debug("Group %s appeared on cell %s", actor.group.contextual_id, actor.group.cell_id)
            return True
        if isinstance(actor, OtherActor):
            return False
        raise TypeError(f"Unsupported actor type: {type(actor).__name__}")

    def _index_of(self, contextual_id: int) -> int | None:
        for index, group in enumerate(self._groups):
            if group.contextual_id == contextual_id:
                return index
        return None
