"""Web user sessions and their expiry."""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass

SLOTS = 2
_RAND_LIMIT = 32767


@dataclass
class WebUser:
    name: str = ""
    password: str = ""


@dataclass
class HostSession:
    user_no: int
    times: tuple


@dataclass(frozen=True)
class IdLookup:
    """Result of looking up a session id: the id to use from now on."""

    log_id: int
    renewed: bool


def minutes_exceeded(extended, then, now):
    """True when more than 5 (or 10 when extended) minutes lie between the two."""
    limit = 5 * (2 if extended else 1)
    if then > now:
        return 60 - then + now > limit
    return now - then > limit


def host_expired(then, now):
    """True when more than 10 minutes lie between the two minute readings."""
    if then > now:
        return 60 - then + now > 10
    return now - then > 10


class HostRegistry:
    """Random-id sessions for logged-in hosts."""

    def __init__(self):
        self.users = {0: WebUser()}
        self.sessions = {}
        self._random = random.Random()

    def add_session(self, user_no, hour, minute, second):
        """Create a session for ``user_no`` and return its id."""
        session_id = None
        for _ in range(250):
            candidate = self._random.randrange(_RAND_LIMIT + 1)
            if candidate not in self.sessions:
                session_id = candidate
                break
        if session_id is None:
            session_id = _RAND_LIMIT + 1
            while session_id in self.sessions:
                session_id += 1
        self.sessions[session_id] = HostSession(user_no, (hour, minute, minute, second))
        return session_id

    def expire(self, minute):
        """Drop sessions idle too long; return the removed ids."""
        removed = [sid for sid, s in self.sessions.items() if host_expired(s.times[2], minute)]
        for sid in removed:
            del self.sessions[sid]
        return removed


class UserRegistry:
    """Per-user current and previous session ids."""

    def __init__(self, slots=SLOTS):
        if slots < 1:
            raise ValueError("at least one slot is needed")
        self.users = {number: WebUser() for number in range(2)}
        self.ids = [[0, 0] for _ in range(slots)]
        self.times = [[99, 99] for _ in range(slots)]
        self._lock = threading.Lock()
        self._random = random.Random()

    def add_id(self, user_no, minute):
        """Return the current id of ``user_no``, creating one if needed."""
        with self._lock:
            if not self.ids[user_no][0]:
                self.times[user_no][0] = minute
                self.ids[user_no][0] = self.new_id()
            return self.ids[user_no][0]

    def get_id(self, session_id, minute):
        """Look a session id up; None when it is unknown."""
        if not session_id:
            return None
        with self._lock:
            for slot, (current, previous) in enumerate(self.ids):
                if current == session_id:
                    return IdLookup(session_id, False)
                if previous == session_id:
                    if not current:
                        self.ids[slot][0] = self.new_id()
                        self.times[slot][0] = minute
                    return IdLookup(self.ids[slot][0], True)
        return None

    def expire(self, minute):
        """Age current ids into previous ones and drop stale previous ids."""
        with self._lock:
            for slot, pair in enumerate(self.ids):
                if pair[1] and minutes_exceeded(True, self.times[slot][1], minute):
                    pair[1] = 0
                if pair[0] and minutes_exceeded(False, self.times[slot][0], minute):
                    self.times[slot][1] = self.times[slot][0]
                    pair[1] = pair[0]
                    pair[0] = 0

    def new_id(self):
        """Draw a fresh non-zero id that no slot holds."""
        value = 1 + sum(self._random.randrange(_RAND_LIMIT) for _ in range(24))
        existing = sorted({v for pair in self.ids for v in pair if v})
        for taken in existing:
            if value >= taken:
                value += 1
        return value