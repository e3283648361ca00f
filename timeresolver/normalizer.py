"""
Normalizer: production rules over the grammar symbols of a text.

The rules run in a fixed order:

P0  pick the candidate chunk of symbols
P1  fold adjacent numbers, ``<n1>[<op>]<n2> ~ <n>``: plus if n1 > n2, times otherwise
P2  redistribute stray numbers, ``<n1><T1>[<op>]<n2><!T2> ~ <n1>[<op>]<n2> <T1>``
P3  fold adjacent origins, ``<o><o> ~ <o>*<o>``

The reduced symbols are then written back out as text for the scanner.
Fully resolved dates are taken out of the text as *normal* forms.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple, Union

import regex as re

from .conf import Settings
from .date import local_now
from .lexicon import classify
from .symbols import (
    RE_T,
    GrammarSymbol,
    Number,
    SymbolKind,
    Time,
    UnitMap,
    format_number,
    is_default,
    is_kind,
    make_symbol,
    strip_default,
    symbol_name,
)
from .tokenizer import tokenize
from .units import (
    highest_override,
    next_largest_unit,
    now_time,
    parse_std,
    split_t,
    t_to_std,
)

logger = logging.getLogger(__name__)

OP = (SymbolKind.OPERATOR,)
NUMBER = (SymbolKind.NUMBER,)
ORIGIN = (SymbolKind.ORIGIN,)
TIME = (SymbolKind.TIME,)

# the op kinds that take part in an op type name
NAMED_OP_KINDS = (SymbolKind.ORIGIN, SymbolKind.RANGE, SymbolKind.CRON)

ARTICLES = ("a", "an")

RE_NUMERIC_TOKEN = re.compile(r"^\s*[\d.\-+]+\s*$")
RE_CLOCK = re.compile(r"(\d+:\d+)")
RE_FIRST_DIGIT = re.compile(r"(\d)")

Item = Union[GrammarSymbol, str]


class _Delimiter:
    def __repr__(self):
        return "DELIMITER"


DELIMITER = _Delimiter()

_END = object()


@dataclass
class NormalizedText:
    """The text for the scanner, its tokens and the normal forms taken out of it."""
    text: str
    tokens: List[str] = field(default_factory=list)
    normals: List[str] = field(default_factory=list)


def _now(reference: Optional[datetime]) -> datetime:
    return reference if reference is not None else local_now()


def _now_symbol(reference: Optional[datetime]) -> Time:
    return make_symbol(now_time(_now(reference)))


# =============================================================================
# P0: candidate selection
# =============================================================================

def delimit(symbols: Sequence[Optional[GrammarSymbol]], tokens: Sequence[str]) -> List[object]:
    """Replace runs of three or more unclassified words by :data:`DELIMITER`.

    Shorter runs stay as their plain words. A trailing long run is dropped.
    """
    items, run = [], []
    for symbol, token in zip(symbols, tokens):
        if symbol is None:
            run.append(token)
            continue
        if len(run) > 2:
            items.append(DELIMITER)
        else:
            items.extend(run)
        run = []
        items.append(symbol)
    if len(run) <= 2:
        items.extend(run)
    return items


def split_chunks(items: Sequence[object]) -> List[List[Item]]:
    chunks, row = [], []
    for item in items:
        if item is DELIMITER:
            chunks.append(row)
            row = []
        else:
            row.append(item)
    if row:
        chunks.append(row)
    return chunks


def order_chunks(chunks: List[List[Item]]) -> List[List[Item]]:
    """Chunks without a time first, then those with one, each short to long."""
    without_time = [c for c in chunks if not any(is_kind(s, TIME) for s in c)]
    with_time = [c for c in chunks if any(is_kind(s, TIME) for s in c)]
    return sorted(without_time, key=len) + sorted(with_time, key=len)


def pick_tokens(symbols: Sequence[Optional[GrammarSymbol]], tokens: Sequence[str]) -> List[Item]:
    candidates = order_chunks(split_chunks(delimit(symbols, tokens)))
    return candidates.pop() if candidates else []


# =============================================================================
# Reduction
# =============================================================================

def reduce(
    symbols: Sequence[Item],
    var_kinds: Tuple[SymbolKind, SymbolKind],
    op_kinds: Tuple[SymbolKind, ...] = OP,
    reference: Optional[datetime] = None,
) -> List[Item]:
    """Combine each adjacent pair of ``var_kinds`` symbols, with an optional op between.

    Args:
        symbols: Symbols and plain words.
        var_kinds: Kinds of the left and right operand.
        op_kinds: Kinds accepted as the operator.
        reference: The instant standing in for "now".

    Returns:
        The reduced list. Operators that were not used are kept.
    """
    if len(symbols) < 2:
        return list(symbols)

    result = []
    past = symbols[0]
    op, inter_op = None, False
    for s in list(symbols[1:]) + [_END]:
        if s is not _END and is_kind(s, op_kinds):
            op, inter_op = s, True
        elif s is not _END and is_kind(past, var_kinds[:1]) and is_kind(s, var_kinds[1:]):
            past = exec_op(past, op, s, reference)
            op, inter_op = None, False
        else:
            if isinstance(past, list):
                result.extend(past)
            else:
                result.append(past)
                if inter_op:
                    result.append(make_symbol(op.value))
            op, inter_op = None, False
            past = s
    return result


def op_type(left, op, right) -> str:
    """The dispatch name of an operation, e.g. ``"nT"`` or ``"ToT"``."""
    op_name = symbol_name(op) if is_kind(op, NAMED_OP_KINDS) else ""
    return symbol_name(left) + op_name + symbol_name(right)


def exec_op(left, op, right, reference: Optional[datetime] = None):
    """Execute the operation named by :func:`op_type`.

    Pairs with no rule are returned as ``[left, op, right]``, or
    ``[left, right]`` without an op.
    """
    kind = op_type(left, op, right)
    if kind == "nn":
        return nn_op(left, op, right)
    if kind == "nT":
        return nt_op(left, op, right)
    if kind == "TT":
        return tt_op(left, op, right)
    if kind in ("ToT", "oT", "To"):
        return tot_op(left, op, right, reference)
    if kind == "oo":
        return oo_op(left, right)
    if kind in ("rT", "TrT"):
        raise NotImplementedError(f"Range combination is not supported: {kind}")
    if kind in ("cT", "fcT", "crT", "fcrT"):
        raise NotImplementedError(f"Cron combination is not supported: {kind}")
    return [left, right] if op is None else [left, op, right]


def _as_text(value) -> str:
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def atomic_op(left, op, right, dont_op: bool = False) -> Optional[str]:
    """Combine two unit values, honouring the ``=`` default marker.

    Both default: right wins. One default: the other wins. Neither: apply
    ``op``, unless ``dont_op`` where left wins. An absent side yields the
    present one, negated when subtracting from an absent left.

    >>> atomic_op("=2", make_symbol("plus"), "3")
    '3'
    >>> atomic_op("2", make_symbol("plus"), "3")
    '5'
    """
    name = op.value
    if left is None:
        if right is None:
            return None
        right = _as_text(right)
        return RE_FIRST_DIGIT.sub(r"-\1", right, count=1) if name == "minus" else right
    if right is None:
        return _as_text(left)

    default_left, default_right = is_default(left), is_default(right)
    l = float(strip_default(left))
    r = float(strip_default(right))
    if default_left:
        return format_number(r)
    if default_right:
        return format_number(l)
    if dont_op:
        return format_number(l)

    if name == "minus":
        return format_number(l - r)
    if name == "plus":
        return format_number(l + r)
    if name == "times":
        return format_number(l * r)
    if name == "divide":
        return format_number(l / r)
    raise ValueError(f"Unknown operator: {name}")


def nn_op(left: Number, op, right: Number) -> Number:
    if op is None:
        op = make_symbol("plus") if left.value > right.value else make_symbol("times")
    return make_symbol(float(atomic_op(left.value, op, right.value)))


def nt_op(number: Number, op, time: Time) -> Time:
    """``<n>[<op>]<T> ~ <T>``

    A default unit of ``t`` is overridden by the number. Otherwise the
    number scales ``dt`` (times) or offsets ``t`` (plus).
    """
    time = time.copy()
    override = highest_override(time.t)
    if override:
        time.t[override] = format_number(number.value)
    elif time.dt:
        op = op or make_symbol("times")
        for unit in time.dt:
            if unit == "wd":
                continue
            time.dt[unit] = atomic_op(number.value, op, time.dt[unit])
    elif time.t:
        op = op or make_symbol("plus")
        for unit in time.t:
            time.t[unit] = atomic_op(number.value, op, time.t[unit])
    return time


def tt_op(left: Time, op, right: Time) -> Time:
    """``<T>[<op>]<T> ~ <T>``: first come first served on ``t``, arithmetic on ``dt``."""
    op = op or make_symbol("plus")
    left = left.copy()
    if right.t:
        left.t = left.t if left.t is not None else UnitMap()
        for unit, value in right.t.items():
            left.t[unit] = atomic_op(left.t.get(unit), op, value, dont_op=True)
    if right.dt:
        left.dt = left.dt if left.dt is not None else UnitMap()
        for unit, value in right.dt.items():
            if unit == "wd":
                continue
            left.dt[unit] = atomic_op(left.dt.get(unit), op, value)
    return left


def oo_op(left, right):
    """``<o><o> ~ <o>``: "after" for a like-signed pair, "before" otherwise."""
    sign = (1 if left.value == "plus" else -1) * (1 if right.value == "plus" else -1)
    return make_symbol("after") if sign > 0 else make_symbol("before")


def next_available(time: Time, reference: Optional[datetime] = None) -> Time:
    """Finalize ``time``; if that lies before ``reference``, move it one unit up first."""
    reference = _now(reference)
    next_unit = next_largest_unit(time)
    finalized = finalize_times([time], reference)[0]
    if next_unit is None or parse_std(t_to_std(finalized, reference)) >= reference:
        return finalized

    bumped = time.copy()
    bumped.dt = bumped.dt if bumped.dt is not None else UnitMap()
    count = float(strip_default(bumped.dt.get(next_unit, "0")))
    bumped.dt[next_unit] = format_number(count + 1)
    return finalize_times([bumped], reference)[0]


def tot_op(left: Optional[Time], op, right: Optional[Time], reference: Optional[datetime] = None) -> Time:
    """``<T><o><T> ~ <T>``, "2 hours after noon", "5 days ago".

    The right operand is the origin and the left one the offset. A missing
    origin is "now". A missing offset in front of a point in time is half of
    the next larger unit, applied to its next available occurrence.
    """
    reference = _now(reference)
    if left is not None and right is None:
        right = _now_symbol(reference)
    elif left is None and right is not None:
        if right.has_t():
            next_unit = next_largest_unit(right)
            right = next_available(right, reference)
            if next_unit is None:
                left = Time()
            else:
                left = exec_op(make_symbol(0.5), make_symbol("times"), make_symbol(next_unit), reference)
        else:
            left = _now_symbol(reference)
    elif left is None and right is None:
        left, right = _now_symbol(reference), _now_symbol(reference)

    right = right.copy()
    for part in ("t", "dt"):
        left_units = getattr(left, part) or {}
        right_units = getattr(right, part)
        if right_units is None:
            right_units = UnitMap()
            setattr(right, part, right_units)
        for unit in list(dict.fromkeys(list(left_units) + list(right_units))):
            right_units[unit] = atomic_op(
                right_units.get(unit), op, left_units.get(unit), dont_op=part == "t"
            )
    return right


# =============================================================================
# P2 and finalization
# =============================================================================

def redistribute(symbols: Sequence[Item], reference: Optional[datetime] = None) -> List[Item]:
    """Move a number not followed by a time next to the nearest ``<n><T>`` on its left.

    "5 days 2" ~ "5 2 days", then numbers are folded again. A plain word in
    between stops the search, so the 5 of "2 years from now at 5 pm" stays put.
    """
    symbols = list(symbols)
    if len(symbols) < 2:
        return symbols

    for i in range(len(symbols)):
        if not is_kind(symbols[i], NUMBER):
            continue
        if i + 1 < len(symbols) and is_kind(symbols[i + 1], TIME):
            continue

        op_index = i - 1 if i > 0 and is_kind(symbols[i - 1], OP) else None
        target = None
        for j in range(i - 1, -1, -1):
            if isinstance(symbols[j], str):
                break
            if is_kind(symbols[j], NUMBER):
                target = j
                break
        if target is None or not is_kind(symbols[target + 1], TIME):
            continue

        carry = [symbols.pop(i)]
        if op_index is not None:
            carry.insert(0, symbols.pop(op_index))
        symbols[target + 1:target + 1] = carry

    return reduce(symbols, NUMBER * 2, reference=reference)


def remove_defaults(time: Time) -> Time:
    time = time.copy()
    for units in (time.t, time.dt):
        if not units:
            continue
        for unit, value in units.items():
            units[unit] = strip_default(value)
    if time.t:
        time.t.pop("mer", None)
    return time


def tdt_add(symbol):
    """Add ``dt`` into ``t`` unit by unit and drop ``dt``."""
    if not is_kind(symbol, TIME):
        return symbol
    symbol = symbol.copy()
    if symbol.dt:
        symbol.t = symbol.t if symbol.t is not None else UnitMap()
        for unit, value in symbol.dt.items():
            total = float(strip_default(symbol.t.get(unit, "0"))) + float(strip_default(value))
            symbol.t[unit] = format_number(total)
        symbol.dt = UnitMap()
    symbol.token = symbol.encode()
    return symbol


def finalize_times(symbols: Sequence[Item], reference: Optional[datetime] = None) -> List[Item]:
    """Resolve each time against ``reference``: strip defaults, fill in "now", add ``dt`` into ``t``."""
    reference = _now(reference)
    symbols = [remove_defaults(s) if is_kind(s, TIME) else s for s in symbols]
    symbols.append(_now_symbol(reference))
    symbols = reduce(symbols, TIME * 2, reference=reference)
    return [tdt_add(s) for s in symbols]


def remove_tn_plus(symbols: Sequence[Item]) -> List[Item]:
    """Drop a "plus" operator directly in front of a number."""
    result = []
    for i, s in enumerate(symbols):
        following = symbols[i + 1] if i + 1 < len(symbols) else None
        if is_kind(s, OP) and s.value == "plus" and is_kind(following, NUMBER):
            continue
        result.append(s)
    return result


# =============================================================================
# Restoring text
# =============================================================================

def restore_normal(time: Time, reference: Optional[datetime] = None) -> Tuple[str, bool]:
    """Write a time back out as text.

    Returns:
        ``(text, is_normal)``. A fully resolved date is a normal form,
        ``"YYYY-MM-DD hh:mm:ss.fff"``. A clock time becomes ``hh:mm``, a
        pure displacement its unit words, anything else its canonical word.
    """
    reference = _now(reference)
    token = time.token
    if isinstance(token, str) and RE_T.search(token):
        fields = split_t(token)
        std = t_to_std(token, reference)
        if None in fields and fields[3] is not None:
            return RE_CLOCK.search(std).group(1), False
        return std, True

    if not time.has_t() and time.has_dt() and time.has_pure_time_units():
        if time.canon is not None:
            return time.canon, False
        words = []
        for unit, value in time.dt.items():
            try:
                count = float(value)
            except ValueError:
                count = None
            if count is None or format_number(count) != value or count == 0 or abs(count) == 1:
                number = ""
            else:
                number = f"{value} "
            lemma = classify(unit)
            words.append(number + (lemma.canon if lemma else unit))
        return " ".join(words), False

    return (time.canon if time.canon is not None else str(token)), False


def restore_number(number: Number, following: Optional[Item] = None) -> str:
    """Write a number back out as text.

    An article counts one only in front of a displacement, "an hour"; it
    stays a word otherwise, "for a meeting".
    """
    token = number.token
    if isinstance(token, str) and RE_NUMERIC_TOKEN.match(token):
        return token.strip()
    if isinstance(token, str) and token.lower() in ARTICLES:
        if is_kind(following, TIME) and following.has_dt():
            return format_number(number.value)
        return token
    return format_number(number.value)


def restore_tokens(symbols: Sequence[Item], reference: Optional[datetime] = None) -> NormalizedText:
    tokens, normals = [], []
    items = remove_tn_plus(symbols)
    for i, s in enumerate(items):
        is_normal = False
        if isinstance(s, str):
            token = s
        elif is_kind(s, NUMBER):
            token = restore_number(s, items[i + 1] if i + 1 < len(items) else None)
        elif is_kind(s, TIME):
            token, is_normal = restore_normal(s, reference)
        else:
            token = str(s.token)

        if is_normal:
            normals.append(token)
        else:
            tokens.append(token)

    text = re.sub(r"\s+", " ", " ".join(tokens)).strip()
    return NormalizedText(text=text, tokens=tokens, normals=normals)


def normalize(text: str, reference: Optional[datetime] = None, settings: Optional[Settings] = None) -> NormalizedText:
    """Run the production rules over ``text``.

    Any failure falls back to the text unchanged with nothing extracted.

    >>> normalize("5 days and 2 hours", datetime(2013, 5, 13, 1, 30)).text
    '5 day 2 hour'
    """
    try:
        tokenized = tokenize(text, settings)
        symbols = pick_tokens(tokenized.symbols, tokenized.tokens)
        symbols = reduce(symbols, NUMBER * 2, reference=reference)
        symbols = redistribute(symbols, reference)
        symbols = reduce(symbols, ORIGIN * 2, reference=reference)
        normalized = restore_tokens(symbols, reference)
    except Exception as e:
        logger.debug(f"Normalization of {text!r} failed, using it as is: {e!r}")
        return NormalizedText(text=text or "")

    logger.debug(f"Normalized {text!r} -> {normalized.text!r}, normals: {normalized.normals}")
    return normalized
