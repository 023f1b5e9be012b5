import json

import httpx
import pytest

from apps.board.sync import (
    AccessDeniedError,
    BoardAPIClient,
    MoveValidationError,
    NetworkError,
    NotFoundError,
    ServerError,
    SyncSettings,
)
from apps.board.sync.api import CLIENT_ID_HEADER

from conftest import board_payload


def make_client(handler):
    http = httpx.AsyncClient(base_url='http://testserver', transport=httpx.MockTransport(handler))
    return BoardAPIClient(SyncSettings(api_url='http://testserver'), client_id='abc', http=http)


@pytest.mark.asyncio
async def test_move_task_request():
    seen = {}

    def handler(request):
        seen['method'] = request.method
        seen['path'] = request.url.path
        seen['body'] = json.loads(request.content)
        seen['client_id'] = request.headers[CLIENT_ID_HEADER]
        return httpx.Response(200, json={'task': {'id': 'T2', 'list_id': 'B', 'position': 0}})

    client = make_client(handler)
    task = await client.move_task('b1', 'T2', 'B', 0)

    assert task['list_id'] == 'B'
    assert seen == {
        'method': 'POST',
        'path': '/board/api/boards/b1/tasks/T2/move/',
        'body': {'list_id': 'B', 'position': 0},
        'client_id': 'abc',
    }


@pytest.mark.asyncio
async def test_fetch_board_builds_snapshot():
    payload = board_payload(lists={'A': ['T2', 'T1']}, member_ids=[5])

    client = make_client(lambda request: httpx.Response(200, json={'board': payload}))
    board = await client.fetch_board('b1')

    assert board.orders() == {'A': ['T2', 'T1']}
    assert board.member_ids == [5]


@pytest.mark.asyncio
async def test_search_users_params():
    def handler(request):
        assert request.url.params['q'] == 'ali'
        assert request.url.params['limit'] == '5'
        return httpx.Response(200, json={'users': [{'id': 2}]})

    client = make_client(handler)
    assert await client.search_users('ali', 5) == [{'id': 2}]


@pytest.mark.asyncio
@pytest.mark.parametrize('status, error', [
    (400, MoveValidationError),
    (401, AccessDeniedError),
    (403, AccessDeniedError),
    (404, NotFoundError),
    (409, MoveValidationError),
    (500, ServerError),
])
async def test_status_mapping(status, error):
    client = make_client(lambda request: httpx.Response(status, json={'error': 'nope'}))

    with pytest.raises(error) as exc_info:
        await client.move_task('b1', 'T1', 'A', 0)

    assert exc_info.value.status_code == status
    assert str(exc_info.value) == 'nope'


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    with pytest.raises(NetworkError):
        await make_client(handler).fetch_board('b1')


@pytest.mark.asyncio
async def test_timeout_is_network_error():
    def handler(request):
        raise httpx.ReadTimeout('slow', request=request)

    with pytest.raises(NetworkError):
        await make_client(handler).move_task('b1', 'T1', 'A', 0)


@pytest.mark.asyncio
async def test_non_json_error_body():
    client = make_client(lambda request: httpx.Response(502, text='<html>bad gateway</html>'))

    with pytest.raises(ServerError) as exc_info:
        await client.list_boards()

    assert '502' in str(exc_info.value)


@pytest.mark.asyncio
async def test_success_with_non_json_body_is_server_error():
    client = make_client(lambda request: httpx.Response(200, text='<html>maintenance</html>'))

    with pytest.raises(ServerError) as exc_info:
        await client.move_task('b1', 'T1', 'A', 0)

    assert exc_info.value.status_code == 200


@pytest.mark.asyncio
async def test_garbled_move_response_resyncs(toasts):
    from apps.board.sync import BoardStore, MoveIntent, MovePersister

    from conftest import snapshot

    def handler(request):
        if request.method == 'POST':
            return httpx.Response(200, text='ok')
        return httpx.Response(200, json={'board': board_payload(lists={'A': ['T1', 'T2', 'T3'], 'B': []})})

    store = BoardStore(snapshot())
    store.apply_move('T2', 'B', 0)
    persister = MovePersister(store, make_client(handler), toasts)

    assert await persister.persist(MoveIntent('T2', 'A', 1, 'B', 0)) is False

    assert store.orders() == {'A': ['T1', 'T2', 'T3'], 'B': []}
    assert [t.level for t in toasts.active()] == ['error']
