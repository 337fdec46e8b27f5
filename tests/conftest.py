import pytest


class FakeScreen:
    """Stand-in for a curses window: replays scripted keys and records drawing."""

    def __init__(self, keys, size=(24, 80)):
        self.keys = list(keys)
        self.size = size
        self.calls = []
        self.refreshes = 0

    def get_wch(self):
        if not self.keys:
            raise AssertionError("session read past the scripted keys")
        key = self.keys.pop(0)
        if isinstance(key, Exception):
            raise key
        return key

    def getmaxyx(self):
        return self.size

    def erase(self):
        self.calls.append(("erase",))

    def move(self, y, x):
        self.calls.append(("move", y, x))

    def addstr(self, *args):
        self.calls.append(("addstr",) + args)

    def refresh(self):
        self.refreshes += 1


class FakeClock:
    """Each call returns the current time, then moves it forward by `step`."""

    def __init__(self, start=100.0, step=0.0):
        self.now = start
        self.step = step

    def __call__(self):
        now = self.now
        self.now += self.step
        return now


@pytest.fixture
def screen_factory():
    return FakeScreen


@pytest.fixture
def clock_factory():
    return FakeClock
