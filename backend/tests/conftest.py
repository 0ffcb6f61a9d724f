import itertools
import random
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest

from sketchparty.errors import StoreUnavailable
from sketchparty.game.service import GameService
from sketchparty.game.timer import TaskHandle
from sketchparty.realtime.events import Publisher


@dataclass
class _Task:
    when: float
    seq: int
    handle: TaskHandle
    fn: Callable[..., Any]
    args: tuple
    interval: float | None = None


class ManualScheduler:
    """Scheduler whose clock only moves when a test calls ``advance``."""

    def __init__(self):
        self.now = 0.0
        self._tasks = []
        self._seq = itertools.count()

    def call_later(self, delay, fn, *args, name=""):
        handle = TaskHandle(name)
        self._tasks.append(_Task(self.now + delay, next(self._seq), handle, fn, args))
        return handle

    def call_every(self, interval, fn, *args, name=""):
        handle = TaskHandle(name)
        self._tasks.append(_Task(self.now + interval, next(self._seq), handle, fn, args, interval))
        return handle

    def spawn(self, fn, *args):
        fn(*args)

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self._tasks if t.when <= target + 1e-9]
            if not due:
                break
            task = min(due, key=lambda t: (t.when, t.seq))
            self._tasks.remove(task)
            self.now = task.when
            if task.handle.cancelled:
                continue
            if task.interval is None:
                task.fn(*task.args)
                task.handle.mark_done()
                continue
            keep = task.fn(*task.args)
            if keep and not task.handle.cancelled:
                task.when += task.interval
                task.seq = next(self._seq)
                self._tasks.append(task)
            else:
                task.handle.mark_done()
        self.now = target

    def pending(self):
        return [t.handle for t in self._tasks if not t.handle.cancelled]


@dataclass
class Emitted:
    event: str
    payload: Any
    to: str | None


class _FakeServer:
    def __init__(self):
        self.rooms = {}

    def enter_room(self, sid, room, namespace=None):
        self.rooms.setdefault(room, set()).add(sid)

    def leave_room(self, sid, room, namespace=None):
        self.rooms.get(room, set()).discard(sid)


class FakeSocketIO:
    def __init__(self):
        self.emitted = []
        self.server = _FakeServer()

    def emit(self, event, *args, to=None, namespace=None, **kwargs):
        self.emitted.append(Emitted(event, args[0] if args else None, to))

    def events(self, name, to=None):
        return [e for e in self.emitted if e.event == name and (to is None or e.to == to)]

    def clear(self):
        self.emitted.clear()


@dataclass
class FakeProfileStore:
    starting_coins: int = 100
    profiles: dict = field(default_factory=dict)
    credits: list = field(default_factory=list)
    failing: set = field(default_factory=set)

    def get(self, uid):
        profile = self.profiles.get(uid)
        return dict(profile) if profile else None

    def find_or_create(self, uid, username):
        profile = self.profiles.setdefault(
            uid, {"uid": uid, "username": username, "coins": self.starting_coins, "xp": 0}
        )
        profile["username"] = username
        return dict(profile)

    def credit(self, uid, coins_delta, xp_delta):
        if uid in self.failing:
            raise StoreUnavailable("database is down")
        self.credits.append((uid, coins_delta, xp_delta))
        profile = self.profiles.get(uid)
        if profile is None:
            return None
        profile["coins"] += coins_delta
        profile["xp"] += xp_delta
        return dict(profile)


GAME_CONFIG = {
    "ROOM_CAPACITY": 4,
    "TOTAL_ROUNDS": 3,
    "ROUND_DURATION_SEC": 60,
    "ROUND_END_DELAY_SEC": 5,
    "TICK_INTERVAL_SEC": 1,
    "MIN_PLAYERS": 2,
}


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def sio():
    return FakeSocketIO()


@pytest.fixture()
def store():
    return FakeProfileStore()


@pytest.fixture()
def service(sio, scheduler, store):
    return GameService(
        Publisher(sio),
        scheduler,
        store,
        GAME_CONFIG,
        words=["Apple"],
        rng=random.Random(1234),
    )


@pytest.fixture()
def login(service):
    def _login(sid, name=None):
        service.login(sid, f"uid-{sid}", name or sid.title())
        return service.players.get(sid)

    return _login


@pytest.fixture()
def playing_room(service, login):
    """Three players (a, b, c) in one room with the first round running."""
    for sid in ("a", "b", "c"):
        login(sid)
    room = service.create_room("a", "Sketchers")
    service.join_room("b", room.id)
    service.join_room("c", room.id)
    service.start_game("a")
    return room
