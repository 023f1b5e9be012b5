import pytest

from apps.board.sync import BoardStore
from apps.board.sync.models import DropTarget

from conftest import snapshot


class TestReads:

    def test_snapshot_is_a_copy(self, store):
        copy = store.snapshot()
        copy.lists[0].tasks.clear()

        assert store.orders()['A'] == ['T1', 'T2', 'T3']

    def test_locate(self, store):
        assert store.locate('T2') == DropTarget('A', 1)
        assert store.locate('missing') is None

    def test_member_ids_include_owner(self):
        store = BoardStore(snapshot(owner_id=1, member_ids=[2, 3]))

        assert sorted(store.member_ids()) == [1, 2, 3]

    def test_empty_store(self):
        store = BoardStore()

        assert not store.loaded
        assert store.board_id is None
        assert store.orders() == {}
        assert store.member_ids() == []


class TestCommands:

    def test_apply_move_notifies_listeners(self, store):
        seen = []
        store.subscribe(lambda s: seen.append(s.version))

        assert store.apply_move('T2', 'B', 0) is True

        assert store.orders() == {'A': ['T1', 'T3'], 'B': ['T2']}
        assert seen == [1]

    def test_noop_move_does_not_notify(self, store):
        seen = []
        store.subscribe(lambda s: seen.append(s.version))

        assert store.apply_move('T1', 'A', 0) is False
        assert seen == []

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(lambda s: seen.append(1))
        unsubscribe()

        store.apply_move('T2', 'B', 0)

        assert seen == []

    def test_replace_discards_local_changes(self, store):
        store.apply_move('T1', 'B', 0)

        store.replace(snapshot())

        assert store.orders() == {'A': ['T1', 'T2', 'T3'], 'B': []}

    def test_move_on_empty_store(self):
        with pytest.raises(KeyError):
            BoardStore().apply_move('T1', 'A', 0)


class TestEvents:

    def test_task_moved_is_idempotent(self, store):
        message = {'task_id': 'T2', 'list_id': 'B', 'position': 0}

        assert store.apply_event('task_moved', message) is True
        after_once = store.orders()
        assert store.apply_event('task_moved', message) is False
        assert store.orders() == after_once == {'A': ['T1', 'T3'], 'B': ['T2']}

    def test_task_moved_unknown_task(self, store):
        with pytest.raises(KeyError):
            store.apply_event('task_moved', {'task_id': 'T9', 'list_id': 'A', 'position': 0})

    def test_task_created(self, store):
        task = {'id': 'T4', 'list_id': 'B', 'title': 'New', 'position': 0, 'priority': 'high'}

        assert store.apply_event('task_created', {'task': task}) is True
        assert store.apply_event('task_created', {'task': task}) is False

        card = store.snapshot().get_list('B').tasks[0]
        assert (card.id, card.title, card.extra['priority']) == ('T4', 'New', 'high')

    def test_task_updated_keeps_place_without_position(self, store):
        store.apply_event('task_updated', {'task': {'id': 'T2', 'title': 'Renamed'}})

        board = store.snapshot()
        assert board.get_list('A').tasks[1].title == 'Renamed'
        assert store.orders()['A'] == ['T1', 'T2', 'T3']

    def test_task_deleted(self, store):
        assert store.apply_event('task_deleted', {'task_id': 'T1'}) is True
        assert store.apply_event('task_deleted', {'task_id': 'T1'}) is False

        assert [t.position for t in store.snapshot().get_list('A').tasks] == [0, 1]

    def test_list_lifecycle(self, store):
        store.apply_event('list_created', {'list': {'id': 'C', 'title': 'Later', 'position': 2}})
        store.apply_event('list_updated', {'list': {'id': 'C', 'title': 'Someday', 'position': 2}})

        assert store.snapshot().get_list('C').title == 'Someday'

        store.apply_event('list_deleted', {'list_id': 'C'})
        assert store.snapshot().get_list('C') is None

    def test_members(self, store):
        store.apply_event('member_added', {'member': {'user_id': 7}})
        assert 7 in store.member_ids()

        store.apply_event('member_removed', {'user_id': 7})
        assert 7 not in store.member_ids()

    def test_unknown_event_is_ignored(self, store):
        assert store.apply_event('board_updated', {'title': 'x'}) is False
