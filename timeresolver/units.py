"""
Carry arithmetic over time units and helpers for the canonical encoding.

The canonical encoding of a combined time is ``t:<units>,dt:<units>``, e.g.
``t:2013y05M13d01h30m00.000s,dt:``. :func:`split_t` decomposes it into the
six calendar fields ``[y, M, d, h, m, s]`` after carrying, and
:func:`t_to_std` renders it as a fixed-width standard string, filling any
missing field from a reference instant.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Dict, List, Optional, Union

from .symbols import (
    RE_T,
    Time,
    UnitMap,
    is_default,
    strip_default,
)

# =============================================================================
# Unit ordering and carry factors
# =============================================================================

# calendar fields of a standard string, large to small
T_ORDERING = ("y", "M", "d", "h", "m", "s")

# factor between each field of T_ORDERING and the next smaller one
UNIT_FACTORS = (365, 30, 24, 60, 60)

DAYS_PER_WEEK = 7

STD_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

Fields = Dict[str, float]


def _to_float(value) -> float:
    return float(strip_default(value)) if value is not None else 0.0


def dump_week(fields: Fields) -> Fields:
    """Fold weeks into days; the canonical fields have no week."""
    if "w" in fields or "d" in fields:
        fields["d"] = _to_float(fields.get("d")) + _to_float(fields.get("w")) * DAYS_PER_WEEK
    fields.pop("w", None)
    return fields


def carry_down(fields: Fields) -> Fields:
    """Push fractional remainders from larger into smaller units.

    >>> carry_down({"h": 1.5})
    {'h': 1, 'm': 30.0}
    """
    carry = 0.0
    last = len(T_ORDERING) - 1
    for i, unit in enumerate(T_ORDERING):
        if fields.get(unit) is None and carry == 0:
            continue
        fields[unit] = _to_float(fields.get(unit)) + carry
        if i == last:
            # overlong seconds decimals are rounded when formatting
            break
        value = fields[unit]
        decimal = value - math.trunc(value)
        if decimal > 0:
            carry = decimal * UNIT_FACTORS[i]
            fields[unit] = math.trunc(value)
        else:
            carry = 0.0
    return fields


def carry_up(fields: Fields) -> Fields:
    """Push integer overflow from smaller into larger units.

    >>> carry_up({"m": 90})
    {'m': 30.0, 'h': 1.0}
    """
    ordering = T_ORDERING[::-1]
    factors = UNIT_FACTORS[::-1]
    carry = 0.0
    last = len(ordering) - 1
    for i, unit in enumerate(ordering):
        if fields.get(unit) is None and carry == 0:
            continue
        fields[unit] = _to_float(fields.get(unit)) + carry
        if i == last:
            break
        deci = math.trunc(fields[unit] / factors[i])
        if deci > 0:
            carry = float(deci)
            fields[unit] = fields[unit] % factors[i]
        else:
            carry = 0.0
    return fields


def carry(fields: Fields) -> Fields:
    return carry_up(carry_down(dump_week(fields)))


def _collect_fields(text: str) -> Fields:
    """Unit values of an encoding, the ``t`` side first.

    The first occurrence of a unit wins, so ``t`` shadows ``dt``.
    """
    fields = {}
    t_part, dt_part = text.split(",")[:2]
    for part in (t_part, dt_part):
        units = part.split(":")[-1]
        if not units:
            continue
        for unit, value in UnitMap.parse(units).items():
            fields.setdefault(unit, value)
    return {unit: value for unit, value in fields.items() if unit in T_ORDERING or unit == "w"}


def split_t(text: Union[str, Time], carry_units: bool = True) -> Optional[List[Optional[float]]]:
    """Split an encoding into ``[y, M, d, h, m, s]``.

    Absent fields are ``None``. Returns ``None`` for text that is not an
    encoding. A complete calendar date (year, month and day all present)
    is not carried, so that a day such as the 31st survives.

    >>> split_t("t:1.5h,dt:")
    [None, None, None, 1.0, 30.0, None]
    """
    if isinstance(text, Time):
        text = text.encode()
    if not isinstance(text, str) or not RE_T.search(text):
        return None
    fields = _collect_fields(RE_T.search(text).group(0))
    if carry_units and not all(fields.get(unit) is not None for unit in ("y", "M", "d")):
        fields = carry(fields)
    else:
        fields = dump_week(fields)
        fields = {unit: _to_float(value) for unit, value in fields.items()}
    return [fields.get(unit) for unit in T_ORDERING]


# =============================================================================
# Standard strings
# =============================================================================

def std_string(value: datetime) -> str:
    """``2013-05-13 01:30:00.000``"""
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}"


def std_to_t(std: str) -> str:
    """Convert a standard string to its encoding.

    >>> std_to_t("2011-10-05 14:48:00.000")
    't:2011y10M05d14h48m00.000s,dt:'
    """
    date, time = std.split(" ")
    y, M, d = date.split("-")
    h, m, s = time.split(":")
    return f"t:{y}y{M}M{d}d{h}h{m}m{s}s,dt:"


def now_time(reference: datetime) -> str:
    """The encoding of ``reference``, used as the implicit "now"."""
    return std_to_t(std_string(reference))


def t_to_std(encoding: Union[str, Time], reference: datetime) -> str:
    """Render an encoding as a standard string, missing fields taken from ``reference``.

    >>> t_to_std("t:10M05d14h48m,dt:", datetime(2016, 1, 1))
    '2016-10-05 14:48:00.000'
    """
    if isinstance(encoding, Time):
        encoding = encoding.encode()
    now_fields = split_t(now_time(reference))
    encoded_fields = split_t(encoding)
    values = [
        value if value is not None else now
        for value, now in zip(encoded_fields, now_fields)
    ]
    y, M, d, h, m, s = values
    return f"{int(y):04d}-{int(M):02d}-{int(d):02d} {int(h):02d}:{int(m):02d}:{s:06.3f}"


def parse_std(std: str) -> datetime:
    return datetime.strptime(std, STD_FORMAT)


# =============================================================================
# Unit queries over combined times
# =============================================================================

def highest_override(units: Optional[UnitMap]) -> Optional[str]:
    """The largest unit of ``units`` that holds a default value."""
    if not units:
        return None
    for unit in T_ORDERING:
        if is_default(units.get(unit)):
            return unit
    return None


def largest_unit(time: Time) -> Optional[str]:
    """The largest unit set in ``time.t``, or if none, in ``time.dt``."""
    for units in (time.t, time.dt):
        for unit in T_ORDERING:
            if units and units.get(unit) is not None:
                return unit
    return None


def next_largest_unit(time: Time) -> Optional[str]:
    """The unit just above :func:`largest_unit`; ``None`` above years."""
    unit = largest_unit(time)
    if unit is None:
        return None
    index = T_ORDERING.index(unit)
    return T_ORDERING[index - 1] if index > 0 else None
