from copy import copy
from datetime import datetime, timedelta
from typing import Dict, Optional

from dateutil.relativedelta import relativedelta
from tzlocal import get_localzone

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def local_now() -> datetime:
    """The current local wall clock time, naive."""
    return datetime.now(get_localzone()).replace(tzinfo=None)


class DateAccumulator:
    """A point in time that the scanner moves around.

    Every unit operation adds a signed quantity and marks its field as
    changed, so that later defaults (e.g. an inferred meridiem) do not
    clobber a value the user gave. Instances are values: :meth:`copy`
    before branching.
    """

    def __init__(self, date: datetime):
        self.date = date
        self._changed: Dict[str, bool] = {}

    def __repr__(self):
        return f"{self.__class__.__name__}({self.date!r})"

    def copy(self) -> "DateAccumulator":
        other = copy(self)
        other._changed = dict(self._changed)
        return other

    def changed(self, field: str) -> bool:
        return self._changed.get(field, False)

    def _add(self, delta: timedelta, field: str) -> "DateAccumulator":
        self.date = self.date + delta
        self._changed[field] = True
        return self

    def second(self, n: float) -> "DateAccumulator":
        return self._add(timedelta(seconds=n), "seconds")

    def minute(self, n: float) -> "DateAccumulator":
        return self._add(timedelta(minutes=n), "minutes")

    def hour(self, n: float) -> "DateAccumulator":
        return self._add(timedelta(hours=n), "hours")

    def day(self, n: float) -> "DateAccumulator":
        return self._add(timedelta(days=n), "days")

    def week(self, n: float) -> "DateAccumulator":
        return self._add(timedelta(weeks=n), "weeks")

    def month(self, n: int) -> "DateAccumulator":
        """Add months, clamping the day to the length of the target month.

        >>> DateAccumulator(datetime(2012, 1, 31)).month(1).date
        datetime.datetime(2012, 2, 29, 0, 0)
        """
        self.date = self.date + relativedelta(months=int(n))
        return self

    def year(self, n: int) -> "DateAccumulator":
        self.date = self.date + relativedelta(years=int(n))
        self._changed["years"] = True
        return self

    def time(self, h: Optional[int] = None, m: Optional[int] = None, s: Optional[int] = None) -> "DateAccumulator":
        """Set the clock; ``None`` keeps the current value of that field.

        Values past the end of the day roll over into the next one.
        """
        if h is None:
            h = self.date.hour
        else:
            self._changed["hours"] = True
        if m is None:
            m = self.date.minute
        else:
            self._changed["minutes"] = True
        if s is None:
            s = self.date.second
        else:
            self._changed["seconds"] = True

        midnight = self.date.replace(hour=0, minute=0, second=0, microsecond=0)
        self.date = midnight + timedelta(hours=h, minutes=m, seconds=s, microseconds=self.date.microsecond)
        return self

    def seek_weekday(self, day: int, n: Optional[int] = None) -> "DateAccumulator":
        """Go to a day of the week, 0 for monday.

        With no ``n`` this is the next such day strictly after the current
        one. A positive ``n`` counts the current day as the first occurrence,
        a negative ``n`` goes back ``|n|`` weeks from this week's one.
        """
        diff = (day - self.date.weekday()) % 7
        if n is None:
            if diff == 0:
                diff = 7
        else:
            if n > 0:
                n -= 1
            diff += 7 * n
        self.date = self.date + timedelta(days=diff)
        return self

    def monday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(0, n)

    def tuesday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(1, n)

    def wednesday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(2, n)

    def thursday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(3, n)

    def friday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(4, n)

    def saturday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(5, n)

    def sunday(self, n: Optional[int] = None) -> "DateAccumulator":
        return self._weekday(6, n)

    def _weekday(self, day, n):
        self._changed["days"] = True
        return self.seek_weekday(day, n)
