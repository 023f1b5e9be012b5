import pytest

from apps.board.sync import ToastQueue


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_toasts_expire():
    clock = FakeClock()
    toasts = ToastQueue(default_duration=3, clock=clock)

    toasts.error('Failed to move task')
    toasts.add('Saved', 'success', duration=10)
    clock.now += 3

    assert [t.message for t in toasts.active()] == ['Saved']


def test_dismiss_and_listeners():
    seen = []
    toasts = ToastQueue()
    toasts.subscribe(seen.append)

    toast = toasts.success('Member added')

    assert seen == [toast]
    assert toasts.dismiss(toast.id) is True
    assert toasts.dismiss(toast.id) is False
    assert toasts.active() == []


def test_unknown_level():
    with pytest.raises(ValueError):
        ToastQueue().add('hm', 'warning')
