# apps/board/sync/models.py

"""
Snapshot types held by the client-side board store.

They mirror the JSON payload returned by ``GET /board/api/boards/<id>/``.
Only the fields the move protocol needs are typed; everything else a task
carries travels untouched in ``extra``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional

TASK_FIELDS = ('id', 'list_id', 'title', 'position')


@dataclass
class TaskCard:
    id: str
    list_id: str
    title: str = ''
    position: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], list_id: Optional[str] = None) -> 'TaskCard':
        return cls(
            id=str(data['id']),
            list_id=str(list_id if list_id is not None else data['list_id']),
            title=data.get('title', ''),
            position=int(data.get('position', 0)),
            extra={k: v for k, v in data.items() if k not in TASK_FIELDS},
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update({
            'id': self.id,
            'list_id': self.list_id,
            'title': self.title,
            'position': self.position,
        })
        return data


@dataclass
class TaskColumn:
    id: str
    title: str = ''
    position: int = 0
    tasks: List[TaskCard] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TaskColumn':
        list_id = str(data['id'])
        tasks = [TaskCard.from_dict(t, list_id=list_id) for t in data.get('tasks', [])]
        tasks.sort(key=lambda t: t.position)
        return cls(
            id=list_id,
            title=data.get('title', ''),
            position=int(data.get('position', 0)),
            tasks=tasks,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'position': self.position,
            'tasks': [t.to_dict() for t in self.tasks],
        }

    def index_of(self, task_id: str) -> int:
        """Index of ``task_id`` in this column, -1 when absent"""
        for idx, task in enumerate(self.tasks):
            if task.id == task_id:
                return idx
        return -1


@dataclass
class BoardSnapshot:
    id: str
    title: str = ''
    owner_id: Optional[int] = None
    member_ids: List[int] = field(default_factory=list)
    lists: List[TaskColumn] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BoardSnapshot':
        lists = [TaskColumn.from_dict(col) for col in data.get('lists', [])]
        lists.sort(key=lambda col: col.position)
        owner = data.get('owner') or {}
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            owner_id=data.get('owner_id', owner.get('id')),
            member_ids=[m['user_id'] for m in data.get('members', [])],
            lists=lists,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'owner_id': self.owner_id,
            'members': [{'user_id': uid} for uid in self.member_ids],
            'lists': [col.to_dict() for col in self.lists],
        }

    def get_list(self, list_id: str) -> Optional[TaskColumn]:
        for col in self.lists:
            if col.id == list_id:
                return col
        return None

    def find_list_containing(self, task_id: str) -> Optional[TaskColumn]:
        for col in self.lists:
            if col.index_of(task_id) != -1:
                return col
        return None

    def orders(self) -> Dict[str, List[str]]:
        """Task ids per list, in visible order"""
        return {col.id: [t.id for t in col.tasks] for col in self.lists}


class DropTarget(NamedTuple):
    list_id: str
    index: int


@dataclass(frozen=True)
class MoveIntent:
    """A requested relocation, captured at drag start and resolved at drag end"""

    task_id: str
    source_list_id: str
    source_position: int
    destination_list_id: str
    destination_position: int

    @property
    def is_noop(self) -> bool:
        return (self.source_list_id == self.destination_list_id
                and self.source_position == self.destination_position)

    def to_request(self) -> Dict[str, Any]:
        return {
            'task_id': self.task_id,
            'list_id': self.destination_list_id,
            'position': self.destination_position,
        }
