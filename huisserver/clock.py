"""Wall clock with the quarter-second style timer used for time broadcasts."""

from __future__ import annotations

from datetime import datetime

TIME_ADDRESS_FILE = "Overige/Tijdadres.txt"


def _late_in_range(value):
    return value >= 10


class Clock:
    """Tracks the local time and drives the broadcast timer."""

    def __init__(self, now=None, time_address=None, on_minute=None):
        now = now or datetime.now()
        self.time_address = time_address
        self.time_updates = []
        self.on_minute = on_minute
        self.timer_running = False
        self.quarter = 0
        self.subtract = 0
        self.timer = [0, 0]
        self.minute_sent = 2
        self.hour = now.hour
        self.minute = now.minute
        self.second = now.second
        self._set_date(now)

    def _set_date(self, now):
        self.day = now.day - 1
        self.month = now.month - 1
        self.year = now.year - 2000
        self.weekday = now.weekday()

    def update(self, now=None):
        """Take a new time reading; return True when a timer broadcast is due."""
        now = now or datetime.now()
        if self.second == now.second:
            return False
        self._set_date(now)
        self.hour = now.hour
        self.second = now.second
        self.subtract = int(_late_in_range(self.month + 1)) + int(_late_in_range(self.day + 1))
        if self.minute != now.minute:
            self.minute = now.minute
            if self.on_minute is not None:
                self.on_minute(self.minute)
            self.second = 88
            return self.update(now)
        if not self.timer_running:
            self.timer_running = True
        elif self.timer[0] == 2:
            self._advance_last_phase()
        elif self.timer[1] == 4:
            self.timer[0] += 1
            self.timer[1] = 0
        else:
            self.timer[1] += 1
        return self.timer[0] != 2 and self.timer[1] > 1

    def _advance_last_phase(self):
        subtract = self.subtract
        step = self.timer[1]
        done = (
            (not subtract and step == 4)
            or (subtract and step == 4 and self.quarter >= subtract)
            or step == 5
        )
        if not done:
            self.timer[1] += 1
            return
        if subtract:
            if self.quarter >= subtract:
                self.quarter -= subtract
            else:
                self.quarter = 4 - (subtract - self.quarter)
        self.timer = [0, 0]

    def update_field(self, index):
        """Field ``index`` of a short time update message."""
        if index == 3:
            return self.hour
        if index == 4:
            return self.second
        if index == 5:
            return self.timer[1]
        return 0

    def time_field(self, index):
        """Field ``index`` of a full time message."""
        if index == 3:
            return self.timer[1]
        if index == 4:
            return self.hour + (24 if self.weekday == 6 else 0)
        if index == 5:
            return self.minute
        if index == 6:
            return self.second
        if index == 7:
            extra = 0 if self.weekday == 6 or self.weekday < 3 else 1
            return self.day + extra * 31
        if index == 8:
            return self.month + self.weekday % 3 * 12
        return 0


def load_time_address(datafile):
    """Read the time broadcast address from the data files, or None."""
    try:
        datafile.open(TIME_ADDRESS_FILE)
    except FileNotFoundError:
        return None
    line = datafile.read_line()
    if not line:
        return None
    digits = line[:2]
    if len(digits) < 2 or not digits.isdigit():
        raise ValueError(f"malformed time address: {line!r}")
    return int(digits)