import pytest
from asgiref.sync import sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser

from apps.board import services
from apps.board.routing import websocket_urlpatterns
from apps.core.models import BoardMember

application = URLRouter(websocket_urlpatterns)

pytestmark = pytest.mark.django_db(transaction=True)


def communicator(board, user, client_id='c1'):
    comm = WebsocketCommunicator(application, f'/ws/board/{board.id}/?client_id={client_id}')
    comm.scope['user'] = user
    return comm


async def connect(board, user, client_id='c1'):
    comm = communicator(board, user, client_id)
    connected, _ = await comm.connect()
    assert connected
    hello = await comm.receive_json_from()
    assert hello['type'] == 'connected'
    assert hello['client_id'] == client_id
    return comm


@pytest.mark.asyncio
async def test_ping_and_sync(board, owner):
    comm = await connect(board, owner)

    await comm.send_json_to({'type': 'ping'})
    assert (await comm.receive_json_from())['type'] == 'pong'

    await comm.send_json_to({'type': 'sync_board'})
    frame = await comm.receive_json_from()
    assert frame['type'] == 'board_sync'
    assert [tl['title'] for tl in frame['board_data']['lists']] == ['To Do', 'In Progress', 'Done']

    await comm.disconnect()


@pytest.mark.asyncio
async def test_anonymous_is_rejected(board):
    connected, _ = await communicator(board, AnonymousUser()).connect()

    assert not connected


@pytest.mark.asyncio
async def test_outsider_is_rejected(board, make_user):
    mallory = await sync_to_async(make_user)('mallory')

    connected, _ = await communicator(board, mallory).connect()

    assert not connected


@pytest.mark.asyncio
async def test_own_events_are_not_echoed(board, owner):
    mine = await connect(board, owner, 'c1')
    other = await connect(board, owner, 'c2')

    message = {'task_id': 't', 'list_id': 'l', 'position': 0, 'origin': 'c1', 'user_id': owner.id}
    await get_channel_layer().group_send(
        services.board_group_name(board.id),
        {'type': 'task_moved', 'message': message},
    )

    frame = await other.receive_json_from()
    assert frame == {'type': 'task_moved', 'message': message}
    assert await mine.receive_nothing()

    await mine.disconnect()
    await other.disconnect()


@pytest.mark.asyncio
async def test_service_broadcast_reaches_members(board, owner, add_member):
    viewer = await sync_to_async(add_member)('vic', BoardMember.VIEWER)
    comm = await connect(board, viewer, 'viewer-tab')

    await sync_to_async(services.broadcast)(board.id, 'list_created', {'list': {'id': 'x'}, 'origin': 'c1'})

    frame = await comm.receive_json_from()
    assert frame['type'] == 'list_created'
    assert frame['message']['list'] == {'id': 'x'}
    assert 'timestamp' in frame['message']

    await comm.disconnect()


@pytest.mark.asyncio
async def test_presence(board, owner, add_member):
    editor = await sync_to_async(add_member)('eddie', BoardMember.EDITOR)
    first = await connect(board, owner, 'c1')

    second = await connect(board, editor, 'c2')
    joined = await first.receive_json_from()
    assert joined['type'] == 'user_joined'
    assert joined['message']['user_id'] == editor.id

    await second.disconnect()
    left = await first.receive_json_from()
    assert left['type'] == 'user_left'

    await first.disconnect()
