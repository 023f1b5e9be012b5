import pytest

from apps.board.sync import (
    BoardSnapshot,
    BoardStore,
    MovePersister,
    NetworkError,
    ToastQueue,
)


def board_payload(board_id='b1', lists=None, owner_id=1, member_ids=()):
    """
    Board JSON as served by the API. ``lists`` maps list id -> task ids
    (insertion order is list order).
    """
    lists = lists if lists is not None else {'A': ['T1', 'T2', 'T3'], 'B': []}
    return {
        'id': board_id,
        'title': 'Board',
        'owner_id': owner_id,
        'members': [{'user_id': uid} for uid in member_ids],
        'lists': [
            {
                'id': list_id,
                'title': list_id,
                'position': list_pos,
                'tasks': [
                    {'id': task_id, 'list_id': list_id, 'title': task_id, 'position': pos}
                    for pos, task_id in enumerate(task_ids)
                ],
            }
            for list_pos, (list_id, task_ids) in enumerate(lists.items())
        ],
    }


def snapshot(**kwargs):
    return BoardSnapshot.from_dict(board_payload(**kwargs))


class FakeBoardAPI:
    """Stands in for BoardAPIClient; the server state is a board payload"""

    client_id = 'client-1'

    def __init__(self, server_board=None):
        self.server_board = server_board or board_payload()
        self.moves = []
        self.fetches = 0
        self.searches = []
        self.users = []
        self.fail_move = None
        self.fail_fetch = None

    async def move_task(self, board_id, task_id, list_id, position):
        self.moves.append({'task_id': task_id, 'list_id': list_id, 'position': position})
        if self.fail_move:
            raise self.fail_move
        return {'id': task_id, 'list_id': list_id, 'position': position}

    async def fetch_board(self, board_id):
        self.fetches += 1
        if self.fail_fetch:
            raise self.fail_fetch
        return BoardSnapshot.from_dict(self.server_board)

    async def search_users(self, query, limit=10):
        self.searches.append(query)
        return list(self.users)

    async def aclose(self):
        pass


@pytest.fixture
def store():
    return BoardStore(snapshot())


@pytest.fixture
def fake_api():
    return FakeBoardAPI()


@pytest.fixture
def toasts():
    return ToastQueue()


@pytest.fixture
def persister(store, fake_api, toasts):
    return MovePersister(store, fake_api, toasts)


@pytest.fixture
def network_down():
    return NetworkError('connection refused')


# === Server fixtures ===

@pytest.fixture
def make_user(db, django_user_model):
    def make(username, **extra):
        return django_user_model.objects.create_user(username=username, password='secret', **extra)
    return make


@pytest.fixture
def owner(make_user):
    return make_user('owner', first_name='Olive', last_name='Owner')


@pytest.fixture
def board(owner):
    from apps.board import services
    return services.create_board(owner, 'Roadmap')


@pytest.fixture
def lists(board):
    """Default lists of ``board``: To Do, In Progress, Done"""
    return list(board.lists.order_by('position'))


@pytest.fixture
def add_member(board, make_user):
    from apps.core.models import BoardMember

    def add(username, role):
        user = make_user(username)
        BoardMember.objects.create(board=board, user=user, role=role)
        return user
    return add
