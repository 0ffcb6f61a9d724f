from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Protocol

from .models import PLAYING, Room

logger = logging.getLogger(__name__)


class TaskHandle:
    """Cancellable reference to a delayed or repeating task.

    Cancelling a handle that already fired or was already cancelled is a no-op.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._cancelled = False
        self._done = False

    def cancel(self) -> None:
        self._cancelled = True

    def mark_done(self) -> None:
        self._done = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._done)

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else ("done" if self._done else "active")
        return f"<TaskHandle {self.name or '?'} {state}>"


class Scheduler(Protocol):
    def call_later(self, delay: float, fn: Callable[..., Any], *args: Any, name: str = "") -> TaskHandle: ...

    def call_every(self, interval: float, fn: Callable[..., bool], *args: Any, name: str = "") -> TaskHandle: ...

    def spawn(self, fn: Callable[..., Any], *args: Any) -> None: ...


class SocketIOScheduler:
    """Runs tasks as Socket.IO background tasks (green threads under eventlet)."""

    def __init__(self, socketio) -> None:
        self._socketio = socketio

    def call_later(self, delay: float, fn: Callable[..., Any], *args: Any, name: str = "") -> TaskHandle:
        handle = TaskHandle(name)

        def _runner() -> None:
            self._socketio.sleep(delay)
            if handle.cancelled:
                return
            try:
                fn(*args)
            except Exception:
                logger.exception("Scheduled task %s failed", name or fn)
            finally:
                handle.mark_done()

        self._socketio.start_background_task(_runner)
        return handle

    def call_every(self, interval: float, fn: Callable[..., bool], *args: Any, name: str = "") -> TaskHandle:
        """Call ``fn`` every ``interval`` seconds until it returns False or the handle is cancelled."""
        handle = TaskHandle(name)

        def _runner() -> None:
            try:
                while True:
                    self._socketio.sleep(interval)
                    if handle.cancelled:
                        break
                    if not fn(*args):
                        break
            except Exception:
                logger.exception("Repeating task %s failed", name or fn)
            finally:
                handle.mark_done()

        self._socketio.start_background_task(_runner)
        return handle

    def spawn(self, fn: Callable[..., Any], *args: Any) -> None:
        self._socketio.start_background_task(fn, *args)


class RoundTimer:
    """Per-room countdown: one tick per interval, ends the round at zero."""

    def __init__(
        self,
        scheduler: Scheduler,
        publisher,
        lock: RLock,
        lookup: Callable[[str], Room | None],
        on_expire: Callable[[Room], Any],
        interval: float = 1.0,
    ) -> None:
        self._scheduler = scheduler
        self._publisher = publisher
        self._lock = lock
        self._lookup = lookup
        self._on_expire = on_expire
        self._interval = interval

    def start(self, room: Room) -> None:
        self.cancel(room)
        token = room.game_state.round_token
        room.timer_task = self._scheduler.call_every(
            self._interval,
            self._tick,
            room.id,
            token,
            name=f"timer:{room.id}:{token}",
        )

    @staticmethod
    def cancel(room: Room) -> None:
        if room.timer_task is not None:
            room.timer_task.cancel()
            room.timer_task = None

    def _tick(self, room_id: str, token: int) -> bool:
        with self._lock:
            room = self._lookup(room_id)
            if room is None:
                return False
            gs = room.game_state
            if gs.round_token != token or gs.phase != PLAYING:
                return False

            if gs.timer > 0:
                gs.timer -= 1
                self._publisher.timer_update(room)
                return True

            logger.info("Round %s timed out in room %s", gs.current_round, room.id)
            self._on_expire(room)
            return False
