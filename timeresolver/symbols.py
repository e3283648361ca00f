"""
Grammar symbols for the time expression grammar.

A symbol is one of a closed set of variants, named by :class:`SymbolKind`.
Time values are kept as strings so that the structural default marker ``=``
survives until the value is combined with something more specific:

>>> make_symbol("t:=9h,dt:12h")
Time(t={'h': '=9'}, dt={'h': '12'})
>>> make_symbol("hour")
Time(t=None, dt={'h': '1'})
>>> make_symbol("90")
Number(value=90.0)
>>> make_symbol("unrecognized") is None
True
"""

from __future__ import annotations

from abc import ABC
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Iterable, Optional

import regex as re

from .lexicon import classify

# =============================================================================
# Units and the canonical encoding
# =============================================================================

TIME_UNIT_ORDER = ("y", "M", "w", "d", "h", "m", "s", "ms")

DEFAULT_MARKER = "="

# t:<units>,dt:<units>, case sensitive
RE_T = re.compile(r"t:\S*,dt:\S*")

_RE_CHUNK_DEFAULT = re.compile(r"^=")
_RE_CHUNK_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?")
_RE_CHUNK_UNIT = re.compile(r"^[a-zA-Z]+")
_RE_NUMERIC = re.compile(r"-?\d+(?:\.\d+)?")
_RE_WHITESPACE = re.compile(r"\s")


def format_number(value) -> str:
    """Shortest text for a number: ``2.0`` -> ``"2"``, ``0.5`` -> ``"0.5"``."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def is_default(value) -> bool:
    return value is not None and str(value).startswith(DEFAULT_MARKER)


def strip_default(value) -> str:
    return str(value)[len(DEFAULT_MARKER):] if is_default(value) else str(value)


def is_numeric_token(token: str) -> bool:
    return bool(_RE_NUMERIC.fullmatch(token)) and format_number(token) == token


class UnitMap(dict):
    """Unit letter -> value string, e.g. ``{'h': '7', 'm': '=30'}``.

    A missing number in the encoding defaults to ``1``, so ``"h"`` reads
    as one hour.
    """

    @classmethod
    def parse(cls, value: str) -> "UnitMap":
        if not value:
            raise ValueError(f"falsy value: {value!r}")
        units = cls()
        rest = value
        while rest:
            marker = DEFAULT_MARKER if _RE_CHUNK_DEFAULT.match(rest) else ""
            rest = _RE_CHUNK_DEFAULT.sub("", rest, count=1)
            number = _RE_CHUNK_NUMBER.match(rest)
            rest = _RE_CHUNK_NUMBER.sub("", rest, count=1)
            unit = _RE_CHUNK_UNIT.match(rest)
            if unit is None:
                raise ValueError(f"missing time unit in {value!r}")
            rest = _RE_CHUNK_UNIT.sub("", rest, count=1)
            units[unit.group(0)] = marker + (number.group(0) if number else "1")
        return units

    def has_values(self) -> bool:
        return any(value is not None for value in self.values())

    def encode(self) -> str:
        ordered = [u for u in TIME_UNIT_ORDER if u in self]
        ordered += [u for u in self if u not in TIME_UNIT_ORDER]
        return "".join(f"{self[u]}{u}" for u in ordered)


# =============================================================================
# Symbol variants
# =============================================================================

class SymbolKind(Enum):
    """Closed set of grammar symbol kinds, valued by their grammar names."""
    OPERATOR = "op"
    ORIGIN = "o"
    RANGE = "r"
    CRON = "c"
    NUMBER = "n"
    TIME = "T"
    FREQUENCY = "f"
    RANGE_RESULT = "rT"
    CRON_RESULT = "cT"


class GrammarSymbol(ABC):
    """Base class of all grammar symbols.

    ``token`` is the source text the symbol was built from and ``canon`` the
    canonical word from the lexicon, if any.
    """

    kind: ClassVar[SymbolKind]
    token: Any = None
    canon: Optional[str] = None

    @property
    def name(self) -> str:
        return self.kind.value

    def copy(self):
        return deepcopy(self)


@dataclass
class Number(GrammarSymbol):
    """A bare quantity."""
    value: float
    kind: ClassVar[SymbolKind] = SymbolKind.NUMBER

    def __post_init__(self):
        self.value = float(self.value)


@dataclass
class Operator(GrammarSymbol):
    """Arithmetic connective: plus, minus, times or divide."""
    value: str
    kind: ClassVar[SymbolKind] = SymbolKind.OPERATOR


@dataclass
class Origin(GrammarSymbol):
    """Directional connective ("from", "ago"): plus or minus."""
    value: str
    kind: ClassVar[SymbolKind] = SymbolKind.ORIGIN


@dataclass
class Range(GrammarSymbol):
    value: str
    kind: ClassVar[SymbolKind] = SymbolKind.RANGE


@dataclass
class Cron(GrammarSymbol):
    value: str
    kind: ClassVar[SymbolKind] = SymbolKind.CRON


@dataclass
class Frequency(GrammarSymbol):
    value: str
    kind: ClassVar[SymbolKind] = SymbolKind.FREQUENCY


@dataclass
class Time(GrammarSymbol):
    """A combined time: absolute units ``t`` and displacement units ``dt``.

    ``value`` is the encoding or lexicon key the symbol was built from.
    """
    t: Optional[UnitMap] = None
    dt: Optional[UnitMap] = None
    value: Optional[str] = field(default=None, compare=False, repr=False)
    kind: ClassVar[SymbolKind] = SymbolKind.TIME

    @classmethod
    def parse(cls, value: str, name: Optional[str] = None) -> "Time":
        """Build from ``t:<units>,dt:<units>``, or from bare units when
        ``name`` is ``"t"`` or ``"dt"``."""
        if name == "t":
            time = cls(t=UnitMap.parse(value), value=value)
        elif name == "dt":
            time = cls(dt=UnitMap.parse(value), value=value)
        else:
            t_part, dt_part = value.split(",")[:2]
            t_units = t_part.split(":")[-1]
            dt_units = dt_part.split(":")[-1]
            time = cls(
                t=UnitMap.parse(t_units) if t_units else None,
                dt=UnitMap.parse(dt_units) if dt_units else None,
                value=value,
            )
        return time

    def has_t(self) -> bool:
        return bool(self.t) and self.t.has_values()

    def has_dt(self) -> bool:
        return bool(self.dt) and self.dt.has_values()

    def has_pure_time_units(self) -> bool:
        return all(k in TIME_UNIT_ORDER for k in list(self.t or ()) + list(self.dt or ()))

    def encode(self) -> str:
        return f"t:{self.t.encode() if self.t else ''},dt:{self.dt.encode() if self.dt else ''}"


@dataclass
class RangeResult(GrammarSymbol):
    """An interval between two symbols."""
    start: GrammarSymbol
    end: GrammarSymbol
    kind: ClassVar[SymbolKind] = SymbolKind.RANGE_RESULT


@dataclass
class CronResult(GrammarSymbol):
    cron: str
    kind: ClassVar[SymbolKind] = SymbolKind.CRON_RESULT


_CONSTRUCTORS = {
    "op": Operator,
    "o": Origin,
    "r": Range,
    "c": Cron,
    "f": Frequency,
}


def make_symbol(obj) -> Optional[GrammarSymbol]:
    """Build the grammar symbol for a token.

    Numbers become :class:`Number`, canonical encodings become :class:`Time`,
    a ``{"start", "end"}`` mapping becomes a :class:`RangeResult`, and any
    other string is looked up in the lexicon. Returns ``None`` for a word
    with no grammatical role.
    """
    if obj is None:
        return None

    if isinstance(obj, dict):
        if obj.get("start") is None or obj.get("end") is None:
            raise ValueError(f"Can't create symbol for {obj!r}")
        symbol = RangeResult(start=obj["start"], end=obj["end"])
    elif isinstance(obj, (int, float)) and not isinstance(obj, bool):
        symbol = Number(obj)
        obj = format_number(obj)
    elif not isinstance(obj, str):
        raise ValueError(f"Can't create symbol for {obj!r}")
    elif is_numeric_token(obj):
        symbol = Number(obj)
    elif RE_T.search(obj):
        if _RE_WHITESPACE.search(obj):
            return None
        symbol = Time.parse(obj)
    else:
        lemma = classify(obj)
        if lemma is None:
            return None
        if lemma.category == "n":
            symbol = Number(lemma.value)
        elif lemma.category in ("t", "dt", "T"):
            symbol = Time.parse(lemma.value, lemma.category)
        else:
            symbol = _CONSTRUCTORS[lemma.category](lemma.value)
        symbol.canon = lemma.canon

    symbol.token = obj
    return symbol


def is_kind(symbol, kinds: Iterable[SymbolKind]) -> bool:
    """True when ``symbol`` is a grammar symbol of one of ``kinds``; plain words never are."""
    return isinstance(symbol, GrammarSymbol) and symbol.kind in tuple(kinds)


def symbol_name(symbol) -> str:
    return symbol.name if isinstance(symbol, GrammarSymbol) else ""
