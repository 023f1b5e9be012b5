import asyncio

import pytest

from apps.board.sync import DebouncedSearch


@pytest.fixture
def results():
    return []


@pytest.fixture
def search(fake_api, results):
    fake_api.users = [
        {'id': 1, 'username': 'owner'},
        {'id': 2, 'username': 'alice'},
        {'id': 3, 'username': 'alina'},
    ]
    return DebouncedSearch(fake_api, results.append, exclude=lambda: [1, 3], delay=0.01)


@pytest.mark.asyncio
async def test_latest_query_supersedes_earlier(search, fake_api, results):
    first = search.submit('al')
    second = search.submit('ali')

    await second
    await asyncio.sleep(0)

    assert first.cancelled()
    assert fake_api.searches == ['ali']
    assert results == [[{'id': 2, 'username': 'alice'}]]
    assert search.searching is False


@pytest.mark.asyncio
async def test_short_query_clears_results(search, fake_api, results):
    assert search.submit(' a ') is None

    assert results == [[]]
    assert fake_api.searches == []


@pytest.mark.asyncio
async def test_cancel_drops_pending_lookup(search, fake_api, results):
    task = search.submit('alice')
    search.cancel()
    await asyncio.sleep(0.05)

    assert task.cancelled()
    assert fake_api.searches == []
    assert results == []
