"""
Scanner: walks the normalized text left to right and moves a
:class:`~timeresolver.date.DateAccumulator` for every rule that matches.

Rules are tried in a fixed order at each position, first match wins. A rule
consumes its match and returns a token name, or ``None`` when it does not
apply. After the scan, a time that lies in the past is rolled over to its
next occurrence unless the text looks back in time.
"""

import logging
from collections import deque
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import regex as re

from .conf import DEFAULT_DAYPART_HOURS, Settings
from .date import WEEKDAYS, DateAccumulator
from .normalizer import normalize
from .units import parse_std

logger = logging.getLogger(__name__)

MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

# 5pm, 5 pm, 5:30pm, 5.30pm, 05:30:10pm, 05:30.10 am
RE_MERIDIEM = re.compile(r"^(\d{1,2})([:.](\d{1,2}))?([:.](\d{1,2}))?\s*([ap]m)")
# 12:30, 12.30, 12:30:10
RE_HOUR_MINUTE = re.compile(r"^(\d{1,2})([:.](\d{1,2}))([:.](\d{1,2}))?")
RE_AT_HOUR = re.compile(r"^at\s?(\d{1,2})$")
RE_DAYS = re.compile(r"\b(sun(day)?|mon(day)?|tues(day)?|wed(nesday)?|thur(sday|s)?|fri(day)?|sat(urday)?)s?\b")
RE_DAY_BY_NAME = re.compile(r"^" + RE_DAYS.pattern)
# 2nd of january, 1 st march, 3rd day of june
RE_ORDINAL_MONTH = re.compile(
    r"((\d{1,2})\s*(st|nd|rd|th))\s(day\s)?(of\s)?(" + "|".join(MONTHS) + ")",
    re.I,
)
RE_MONTH_BY_NAME = re.compile(r"^" + RE_ORDINAL_MONTH.pattern, re.I)
RE_PAST = re.compile(r"\b(last|yesterday|ago|today)\b")
RE_DAY_MOD = re.compile(r"\b(morning|noon|afternoon|tonight|evening|midnight)\b")
RE_AGO = re.compile(r"^(\d*)\s?\b(second|minute|hour|day|week|month|year)[s]?\b\s?ago$")
RE_AT = re.compile(r"\bat\b")

RE_SPACE = re.compile(r"^\s+")
RE_NEXT = re.compile(r"^next")
RE_LAST = re.compile(r"^last")
RE_YESTERDAY = re.compile(r"^(yes(terday)?)")
RE_TOMORROW = re.compile(r"^tom(orrow)?")
RE_FORTNIGHT = re.compile(r"^fortnight")
RE_AGO_WORD = re.compile(r"^ago\b")
RE_SECOND = re.compile(r"^s(ec|econd)?s?\b")
RE_MINUTE = re.compile(r"^m(in|inute)?s?\b")
RE_HOUR = re.compile(r"^h(r|our)s?\b")
RE_DAY = re.compile(r"^d(ay)?s?\b")
RE_WEEK = re.compile(r"^w(k|eek)s?\b")
RE_MONTH = re.compile(r"^mon(th)?(es|s)?\b")
RE_YEAR = re.compile(r"^y(r|ear)s?\b")
RE_AM = re.compile(r"^am\b")
RE_PM = re.compile(r"^pm\b")
RE_MIDNIGHT = re.compile(r"^midnight\b")
RE_NOON = re.compile(r"^noon\b")
RE_TONIGHT = re.compile(r"^(?:to)?night\b")
RE_EVENING = re.compile(r"^evening\b")
RE_AFTERNOON = re.compile(r"^afternoon\b")
RE_MORNING = re.compile(r"^morning\b")
RE_NUMBER = re.compile(r"^(\d+)")
RE_STRING = re.compile(r"^\w+")
RE_OTHER = re.compile(r"^.", re.S)

DAY_NAMES = {name[:3]: name for name in WEEKDAYS}

# unit and weekday words a quantity can be applied to
MUTATORS: Dict[str, Callable[[DateAccumulator, int], DateAccumulator]] = {
    "second": DateAccumulator.second,
    "minute": DateAccumulator.minute,
    "hour": DateAccumulator.hour,
    "day": DateAccumulator.day,
    "week": DateAccumulator.week,
    "month": DateAccumulator.month,
    "year": DateAccumulator.year,
}
MUTATORS.update({name: getattr(DateAccumulator, name) for name in WEEKDAYS})


class Parser:
    """Resolve a text against a reference instant.

    >>> Parser.parse("next week tuesday", datetime(2013, 5, 13, 1, 30))
    datetime.datetime(2013, 5, 21, 1, 30)
    """

    def __init__(self, text: str, reference: datetime, settings: Optional[Settings] = None):
        self.text = text or ""
        self.reference = reference
        self.settings = settings or Settings()
        self.daypart_hours = {**DEFAULT_DAYPART_HOURS, **self.settings.DEFAULT_DAYPART_HOURS}

        self.date = DateAccumulator(reference)
        self.original = ""
        self.str = ""
        self.stash = deque()
        self.tokens: List[str] = []
        self.meridiem: Optional[str] = None

        self._rules = [
            self._eos,
            self._next_modifier,
            self._last_modifier,
            self._day_by_name,
            self._month_by_name,
            self._time_ago,
            self._ago,
            self._yesterday,
            self._tomorrow,
            self._fortnight,
            self._am,
            self._pm,
            self._midnight,
            self._noon,
            self._tonight,
            self._evening,
            self._afternoon,
            self._morning,
            self._meridiem,
            self._hour_minute,
            self._at_hour,
            self._week,
            self._month,
            self._year,
            self._second,
            self._minute,
            self._hour,
            self._day,
            self._number,
            self._string,
            self._other,
        ]

    @classmethod
    def parse(cls, text: str, reference: datetime, settings: Optional[Settings] = None) -> datetime:
        instance = cls(text, reference, settings)
        return instance._parse()

    def _parse(self) -> datetime:
        normalized = normalize(self.text, self.reference, self.settings)

        if not normalized.text and normalized.normals:
            for normal in normalized.normals:
                try:
                    date = parse_std(normal)
                except ValueError as e:
                    logger.debug(f"Skipping normal form {normal!r}: {e}")
                    continue
                return date.replace(tzinfo=self.reference.tzinfo)

        self.original = normalized.text
        self.str = normalized.text.lower()
        while self._advance() != "eos":
            pass
        logger.debug(f"Tokens of {self.original!r}: {self.tokens}")

        self._rollover()

        if self.date.date == self.reference:
            logger.debug(f"No temporal expression in {self.text!r}")
            return self.reference
        return self.date.date

    # =========================================================================
    # Token stream
    # =========================================================================

    def _advance(self) -> str:
        match = RE_SPACE.match(self.str)
        if match:
            self._skip(match)
        for rule in self._rules:
            token = rule()
            if token is not None:
                self.tokens.append(token)
                return token
        raise AssertionError("the catch-all rule did not match")

    def _peek(self) -> str:
        """Scan the following token and stash it."""
        token = self._advance()
        self.stash.append(token)
        return token

    def _next_token(self) -> str:
        """The next token, taken from the stash first."""
        if self.stash:
            return self.stash.popleft()
        return self._advance()

    def _skip(self, match):
        self.str = self.str[match.end():]

    def _match(self, pattern):
        match = pattern.match(self.str)
        if match:
            self._skip(match)
        return match

    # =========================================================================
    # Helpers
    # =========================================================================

    def _time(self, h: int, m: Optional[int], s: Optional[int], meridiem: Optional[str]):
        if meridiem:
            if meridiem == "pm" and h < 12:
                h += 12
            if meridiem == "am" and h == 12:
                h = 0
        m = None if not m and self.date.changed("minutes") else (m or 0)
        s = None if not s and self.date.changed("seconds") else (s or 0)
        self.date.time(h, m, s)

    def _set_hour(self, hour: int):
        self.date.date = self.date.date.replace(hour=hour, minute=0, second=0)

    def _daypart(self, name: str, meridiem: Optional[str] = None, force: bool = False) -> str:
        if meridiem:
            self.meridiem = meridiem
        if force or not self.date.changed("hours"):
            self._set_hour(self.daypart_hours[name])
        return name

    def _modifier(self, name: str, n: int) -> str:
        before = self.date.copy()
        mod = self._peek()
        if mod in MUTATORS:
            self._next_token()
            self.date = before
            MUTATORS[mod](self.date, n)
        elif RE_DAY_MOD.search(mod):
            self.date.day(n)
        return name

    def _rollover(self):
        """Move a time that lies in the past to its next occurrence."""
        original = self.original.lower()
        if self.reference <= self.date.date or RE_PAST.search(original):
            return
        if RE_DAYS.search(original):
            logger.debug("Rolling over a past weekday by a week")
            self.date.day(7)
        elif (self.reference - self.date.date).total_seconds() > self.settings.ROLLOVER_THRESHOLD:
            if RE_ORDINAL_MONTH.search(original):
                logger.debug("Past date names a month, not rolling over")
            else:
                logger.debug("Rolling over a past time by a day")
                self.date.day(1)

    # =========================================================================
    # Rules
    # =========================================================================

    def _eos(self):
        if not self.str:
            return "eos"

    def _next_modifier(self):
        if self._match(RE_NEXT):
            return self._modifier("next", 1)

    def _last_modifier(self):
        if self._match(RE_LAST):
            return self._modifier("last", -1)

    def _day_by_name(self):
        match = self._match(RE_DAY_BY_NAME)
        if match:
            name = DAY_NAMES[match.group(1)[:3]]
            MUTATORS[name](self.date, 1)
            return name

    def _month_by_name(self):
        match = self._match(RE_MONTH_BY_NAME)
        if match:
            day = int(match.group(2))
            month = MONTHS.index(match.group(6).lower()) + 1
            # day overflow rolls into the next month, 31st of september is october 1
            self.date.date = self.date.date.replace(month=month, day=1) + timedelta(days=day - 1)
            return match.group(0)

    def _time_ago(self):
        match = self._match(RE_AGO)
        if match:
            n = int(match.group(1) or 1)
            MUTATORS[match.group(2)](self.date, -n)
            return "timeAgo"

    def _ago(self):
        if self._match(RE_AGO_WORD):
            return "ago"

    def _yesterday(self):
        if self._match(RE_YESTERDAY):
            self.date.day(-1)
            return "yesterday"

    def _tomorrow(self):
        if self._match(RE_TOMORROW):
            self.date.day(1)
            return "tomorrow"

    def _fortnight(self):
        if self._match(RE_FORTNIGHT):
            self.date.day(14)
            return "fortnight"

    def _am(self):
        if self._match(RE_AM):
            return self._daypart("am")

    def _pm(self):
        if self._match(RE_PM):
            return self._daypart("pm")

    def _midnight(self):
        if self._match(RE_MIDNIGHT):
            return self._daypart("midnight", force=True)

    def _noon(self):
        if self._match(RE_NOON):
            return self._daypart("noon", "pm")

    def _tonight(self):
        if self._match(RE_TONIGHT):
            return self._daypart("tonight", "pm")

    def _evening(self):
        if self._match(RE_EVENING):
            return self._daypart("evening", "pm")

    def _afternoon(self):
        if self._match(RE_AFTERNOON):
            return self._daypart("afternoon", "pm")

    def _morning(self):
        if self._match(RE_MORNING):
            return self._daypart("morning", "am")

    def _meridiem(self):
        match = self._match(RE_MERIDIEM)
        if match:
            self._time(int(match.group(1)), _int(match.group(3)), _int(match.group(5)), match.group(6))
            return "meridiem"

    def _hour_minute(self):
        match = self._match(RE_HOUR_MINUTE)
        if match:
            self._time(int(match.group(1)), _int(match.group(3)), _int(match.group(5)), self.meridiem)
            return "hourminute"

    def _at_hour(self):
        match = self._match(RE_AT_HOUR)
        if match:
            self._time(int(match.group(1)), 0, 0, self.meridiem)
            self.meridiem = None
            return "athour"

    def _week(self):
        if self._match(RE_WEEK):
            return "week"

    def _month(self):
        if self._match(RE_MONTH):
            return "month"

    def _year(self):
        if self._match(RE_YEAR):
            return "year"

    def _second(self):
        if self._match(RE_SECOND):
            return "second"

    def _minute(self):
        if self._match(RE_MINUTE):
            return "minute"

    def _hour(self):
        if self._match(RE_HOUR):
            return "hour"

    def _day(self):
        if self._match(RE_DAY):
            return "day"

    def _number(self):
        match = self._match(RE_NUMBER)
        if not match:
            return None
        n = int(match.group(1))
        mod = self._peek()
        if mod in MUTATORS:
            if self._peek() == "ago":
                n = -n
            MUTATORS[mod](self.date, n)
        elif self.meridiem:
            self._time(n, 0, 0, self.meridiem)
            self.meridiem = None
        elif RE_AT.search(self.original.lower()):
            self._time(n, 0, 0, self.meridiem)
            self.meridiem = None
        return "number"

    def _string(self):
        if self._match(RE_STRING):
            return "string"

    def _other(self):
        if self._match(RE_OTHER):
            return "other"


def _int(value: Optional[str]) -> Optional[int]:
    return int(value) if value is not None else None
