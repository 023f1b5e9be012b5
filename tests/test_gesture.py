import asyncio

import pytest

from apps.board.sync import DragController, DragState, MoveIntent

from conftest import snapshot


@pytest.fixture
def drag(store, persister):
    return DragController(store, persister)


@pytest.mark.asyncio
async def test_drag_to_empty_list(drag, store, fake_api):
    """A=[T1,T2,T3], B=[]: T2 dropped on B"""
    assert drag.start('T2')
    assert drag.over('B') is True
    assert store.orders() == {'A': ['T1', 'T3'], 'B': ['T2']}

    intent = await drag.end('B')

    assert store.orders() == {'A': ['T1', 'T3'], 'B': ['T2']}
    assert fake_api.moves == [{'task_id': 'T2', 'list_id': 'B', 'position': 0}]
    assert intent == MoveIntent('T2', 'A', 1, 'B', 0)
    assert drag.state is DragState.IDLE


@pytest.mark.asyncio
async def test_reorder_within_list(drag, store, fake_api):
    """T3 dropped over T1: A becomes [T3,T1,T2]"""
    drag.start('T3')
    assert drag.over('T1') is False  # same list: nothing moves while hovering

    await drag.end('T1')

    assert store.orders()['A'] == ['T3', 'T1', 'T2']
    assert [t.position for t in store.snapshot().get_list('A').tasks] == [0, 1, 2]
    assert fake_api.moves == [{'task_id': 'T3', 'list_id': 'A', 'position': 0}]


@pytest.mark.asyncio
async def test_first_of_one_list_to_first_of_another(fake_api, persister):
    store = persister.store
    store.replace(snapshot(lists={'A': ['T1', 'T2', 'T3'], 'B': ['U1', 'U2']}))
    drag = DragController(store, persister)

    drag.start('T1')
    drag.over('U1')
    await drag.end('T1')

    assert store.orders() == {'A': ['T2', 'T3'], 'B': ['T1', 'U1', 'U2']}
    assert fake_api.moves == [{'task_id': 'T1', 'list_id': 'B', 'position': 0}]


@pytest.mark.asyncio
async def test_drop_where_it_started_sends_nothing(drag, store, fake_api):
    drag.start('T2')
    drag.over('T2')

    assert await drag.end('T2') is None
    assert fake_api.moves == []
    assert store.version == 0


@pytest.mark.asyncio
async def test_round_trip_back_to_origin_sends_nothing(drag, store, fake_api):
    drag.start('T1')
    drag.over('B')
    drag.over('T2')  # back into A, at T2's index

    drag.over('T1')
    assert await drag.end('T1') is None
    assert fake_api.moves == []
    assert store.orders()['A'] == ['T1', 'T2', 'T3']


@pytest.mark.asyncio
async def test_hovering_same_target_twice_is_stable(drag, store):
    drag.start('T1')

    assert drag.over('B') is True
    assert drag.over('B') is False
    assert store.orders()['B'] == ['T1']


@pytest.mark.asyncio
async def test_failed_move_restores_server_state(drag, store, fake_api, toasts, network_down):
    fake_api.fail_move = network_down

    drag.start('T2')
    drag.over('B')
    await drag.end('B')

    fresh = await fake_api.fetch_board('b1')
    assert store.orders() == fresh.orders()
    assert [t.message for t in toasts.active()] == ['Failed to move task']


@pytest.mark.asyncio
async def test_cancel_after_cross_list_hover_resyncs(drag, store, fake_api):
    drag.start('T1')
    drag.over('B')

    assert await drag.end(None) is None

    assert fake_api.moves == []
    assert fake_api.fetches == 1
    assert store.orders()['A'] == ['T1', 'T2', 'T3']


@pytest.mark.asyncio
async def test_cancel_without_changes_does_not_fetch(drag, fake_api):
    drag.start('T1')
    await drag.cancel()

    assert fake_api.fetches == 0
    assert drag.state is DragState.IDLE


@pytest.mark.asyncio
async def test_stale_target_aborts(drag, store, fake_api):
    drag.start('T1')
    store.apply_event('task_deleted', {'task_id': 'T3'})

    assert await drag.end('T3') is None
    assert fake_api.moves == []


def test_start_on_unknown_task(drag):
    assert drag.start('ghost') is False
    assert drag.state is DragState.IDLE
    assert drag.over('A') is False


@pytest.mark.asyncio
async def test_new_drag_while_previous_move_in_flight(fake_api, persister):
    """The second gesture is persisted even if it starts before the first request returns"""
    store = persister.store
    store.replace(snapshot(lists={'A': ['T1', 'T2', 'T3'], 'B': [], 'C': []}))
    drag = DragController(store, persister)

    release = asyncio.Event()
    send_move = fake_api.move_task

    async def slow_move(*args):
        await release.wait()
        return await send_move(*args)

    fake_api.move_task = slow_move

    drag.start('T1')
    drag.over('B')
    first = asyncio.ensure_future(drag.end('B'))
    await asyncio.sleep(0)
    assert drag.state is DragState.IDLE

    assert drag.start('T2')
    assert drag.over('C') is True

    release.set()
    assert await first == MoveIntent('T1', 'A', 0, 'B', 0)
    assert drag.state is DragState.HOVERING

    second = await drag.end('C')

    assert second == MoveIntent('T2', 'A', 0, 'C', 0)
    assert store.orders() == {'A': ['T3'], 'B': ['T1'], 'C': ['T2']}
    assert fake_api.moves == [
        {'task_id': 'T1', 'list_id': 'B', 'position': 0},
        {'task_id': 'T2', 'list_id': 'C', 'position': 0},
    ]
