import pytest

from apps.board.sync import MoveIntent, MoveValidationError, NotFoundError

from conftest import board_payload


@pytest.mark.asyncio
async def test_noop_intent_sends_nothing(persister, fake_api):
    intent = MoveIntent('T1', 'A', 0, 'A', 0)

    assert await persister.persist(intent) is False
    assert fake_api.moves == []


@pytest.mark.asyncio
async def test_accepted_move(persister, fake_api, toasts):
    intent = MoveIntent('T2', 'A', 1, 'B', 0)

    assert await persister.persist(intent) is True
    assert fake_api.moves == [intent.to_request()]
    assert fake_api.fetches == 0
    assert toasts.active() == []


@pytest.mark.asyncio
async def test_rejected_move_resyncs_to_server_state(persister, store, fake_api, toasts):
    fake_api.server_board = board_payload(lists={'A': ['T1'], 'B': ['T3', 'T2']})
    fake_api.fail_move = MoveValidationError('Destination list belongs to another board', 400)
    store.apply_move('T2', 'B', 0)

    assert await persister.persist(MoveIntent('T2', 'A', 1, 'B', 0)) is False

    assert store.orders() == {'A': ['T1'], 'B': ['T3', 'T2']}
    assert [(t.level, t.message) for t in toasts.active()] == [('error', 'Failed to move task')]


@pytest.mark.asyncio
async def test_resync_failure_is_reported_not_raised(persister, store, fake_api, toasts, network_down):
    fake_api.fail_move = NotFoundError('Not found', 404)
    fake_api.fail_fetch = network_down
    store.apply_move('T2', 'B', 0)

    assert await persister.persist(MoveIntent('T2', 'A', 1, 'B', 0)) is False

    assert store.orders()['B'] == ['T2']  # stale, nothing better available
    assert [t.message for t in toasts.active()] == [
        'Failed to move task',
        'Lost sync with the board, reload to continue',
    ]
