"""
Tokenizer: raw text to a sequence of grammar symbols.

Steps, in order:

1. Separate digit runs from letter runs ("10m" -> "10 m").
2. Find *normal forms*, windows of words that dateutil parses as a complete
   calendar date ("May 13, 2011 01:30:00"), and replace them by their
   canonical encoding.
3. Rewrite *subnormal forms* (slash dates, slash date ranges and compact
   clock times) to canonical encodings until no rule fires.
4. Split on whitespace and strip punctuation off the edges of plain words.
5. Classify every word, preferring a two-word phrase that classifies to the
   same value as its first word.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

import regex as re
from dateutil import parser as date_parser
from tzlocal import get_localzone

from .conf import Settings
from .symbols import RE_T, GrammarSymbol, make_symbol
from .units import std_string, std_to_t

logger = logging.getLogger(__name__)

# =============================================================================
# Patterns
# =============================================================================

RE_DIGIT_LETTER = re.compile(r"\s+(\d+)([a-zA-Z]+)")
RE_LETTER_DIGIT = re.compile(r"\s+([a-zA-Z]+)(\d+)")
RE_WHITESPACE = re.compile(r"\s+")
RE_LEADING_NON_WORD = re.compile(r"^\W+")
RE_TRAILING_NON_WORD = re.compile(r"\W+$")

# 12/20 - 12/21, 2012/12 - 2013/12
RE_MMsDDdMMsDD = re.compile(
    r"(?!\d{1,4}/\d{1,4}\s*-\s*\d{1,4}/\d{1,4}/)(\d{1,4})/(\d{1,4})\s*-\s*(\d{1,4})/(\d{1,4})"
)
# 12/22 - 23, 2012/10 - 12
RE_MMsDDdDD = re.compile(r"(?!\d{1,4}/\d{1,4}\s*-\s*\d{1,4}/)(\d{1,4})/(\d{1,4})\s*-\s*(\d{1,4})")
# 12/24, 2012/12
RE_MMsDD = re.compile(r"(?!\d{1,4}/\d{1,4}/)(\d{1,4})/(\d{1,4})")
# 05:30pm, 0530pm, 1730, 1730pm; the trailing word is carried over
RE_HHcMM = re.compile(r"(\s+\d{1,2}|^\d{1,2}):?(\d{2})\s*(\S+)*")

# encoding, optionally a range of two, as emitted by the subnormal rewrites
RE_T_OR_RANGE = re.compile(r"t:\S*,dt:\S*(\s*-\s*t:\S*,dt:\S*)?")

# a normal form must name a four-digit year and a month
RE_YEAR = re.compile(r"\b\d{4}\b")
RE_MONTH = re.compile(
    r"\b(jan(uary)?|feb(ruary)?|mar(ch)?|apr(il)?|may|june?|july?|aug(ust)?"
    r"|sep(t(ember)?)?|oct(ober)?|nov(ember)?|dec(ember)?)\b"
    r"|\d{1,4}[-/.]\d{1,2}",
    re.I,
)

NORMAL_DEFAULT = datetime(2000, 1, 1)


@dataclass
class TokenizedText:
    """Result of :func:`tokenize`.

    ``tokens`` and ``symbols`` run in parallel, one entry per word or
    two-word phrase. ``tokens_out`` are the substrings taken out of the text
    and ``tokens_in`` what replaced them, in order.
    """
    text: str
    tokens: List[str] = field(default_factory=list)
    symbols: List[Optional[GrammarSymbol]] = field(default_factory=list)
    tokens_out: List[str] = field(default_factory=list)
    tokens_in: List[str] = field(default_factory=list)


# =============================================================================
# Normal forms
# =============================================================================

def parse_normal_date(text: str) -> Optional[datetime]:
    """Parse ``text`` as a complete calendar date, or ``None``.

    Aware results are converted to the local zone and made naive.
    """
    if not RE_YEAR.search(text) or not RE_MONTH.search(text):
        return None
    try:
        parsed = date_parser.parse(text, default=NORMAL_DEFAULT)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(get_localzone()).replace(tzinfo=None)
    return parsed


def parse_normal(text: str, min_length: int) -> Tuple[List[str], List[str]]:
    """Find windows of words that parse as a complete date.

    For each start word the window grows until it parses, keeps growing while
    it still parses, then sheds leading words that do not change the parsed
    value. Windows shorter than ``min_length`` characters are ignored.

    Returns:
        ``(tokens_in, tokens_out)``: the standard strings and the windows
        they were parsed from.
    """
    tokens_in, tokens_out = [], []
    words = text.split()
    start = 0
    while start < len(words):
        end, parsed = start + 1, None
        while end <= len(words):
            parsed = parse_normal_date(" ".join(words[start:end]))
            if parsed is not None:
                break
            end += 1
        if parsed is None:
            start += 1
            continue

        while end < len(words):
            extended = parse_normal_date(" ".join(words[start:end + 1]))
            if extended is None:
                break
            parsed, end = extended, end + 1

        head = start
        while head < end - 1 and parse_normal_date(" ".join(words[head + 1:end])) == parsed:
            head += 1

        window = " ".join(words[head:end])
        if len(window) >= min_length:
            logger.debug(f"Normal form {window!r} -> {parsed}")
            tokens_in.append(std_string(parsed))
            tokens_out.append(window)
            start = end
        else:
            start += 1
    return tokens_in, tokens_out


# =============================================================================
# Subnormal forms
# =============================================================================

def ymd_parse(first: str, second: str) -> str:
    """Units for a slash date; a four-digit part is the year.

    >>> ymd_parse("12", "24")
    '12M24d'
    >>> ymd_parse("2012", "12")
    '2012y12M'
    """
    years = [token for token in (first, second) if len(token) == 4]
    rest = [token for token in (first, second) if len(token) != 4]
    y = f"{years[0]}y" if years else ""
    M = f"{rest[0]}M"
    d = f"{rest[1]}d" if len(rest) > 1 else ""
    return y + M + d


def _rewrite_once(text: str) -> Optional[Tuple[str, str]]:
    match = RE_MMsDDdMMsDD.search(text)
    if match:
        first = ymd_parse(match.group(1), match.group(2))
        second = ymd_parse(match.group(3), match.group(4))
        return match.group(0), f" t:{first},dt: - t:{second},dt: "

    match = RE_MMsDDdDD.search(text)
    if match:
        first = ymd_parse(match.group(1), match.group(2))
        second = ymd_parse(match.group(1), match.group(3))
        return match.group(0), f" t:{first},dt: - t:{second},dt: "

    match = RE_MMsDD.search(text)
    if match:
        return match.group(0), f" t:{ymd_parse(match.group(1), match.group(2))},dt: "

    match = RE_HHcMM.search(text)
    if match:
        hour, minute, tail = match.group(1).strip(), match.group(2), match.group(3) or ""
        return match.group(0), f" t:{hour}h{minute}m,dt: {tail}"

    return None


def parse_subnormal(text: str, max_passes: int) -> Tuple[str, List[str], List[str]]:
    """Rewrite subnormal forms until no rule fires or ``max_passes`` is hit.

    Returns:
        ``(text, tokens_in, tokens_out)``
    """
    tokens_in, tokens_out = [], []
    for _ in range(max_passes):
        rewrite = _rewrite_once(text)
        if rewrite is None:
            break
        old, new = rewrite
        tokens_out.append(old)
        tokens_in.append(new)
        text = text.replace(old, new, 1)
    else:
        logger.debug(f"Subnormal rewriting stopped after {max_passes} passes")
    return text, tokens_in, tokens_out


def not_subnormal(window: str, max_passes: int) -> bool:
    """True if ``window`` is more than a single subnormal form."""
    rewritten, _, _ = parse_subnormal(window, max_passes)
    return re.search(r"\w", RE_T_OR_RANGE.sub("", rewritten, count=1)) is not None


def inject_normal(text: str, windows: List[str], parsed: List[str]) -> str:
    for window, std in zip(windows, parsed):
        text = text.replace(window, std_to_t(std), 1)
    return text


# =============================================================================
# Tokenize
# =============================================================================

def separate_digits(text: str) -> str:
    """
    >>> separate_digits("at5 10m")
    'at 5 10 m'
    """
    text = RE_DIGIT_LETTER.sub(r" \1 \2", " " + text)
    text = RE_LETTER_DIGIT.sub(r" \1 \2", text)
    return RE_WHITESPACE.sub(" ", text).lstrip()


def clean_token(token: str) -> str:
    if RE_T.search(token):
        return token
    return RE_TRAILING_NON_WORD.sub("", RE_LEADING_NON_WORD.sub("", token))


def tokenize(text: str, settings: Optional[Settings] = None) -> TokenizedText:
    """Tokenize ``text`` into grammar symbols, ``None`` for plain words.

    >>> [s and s.name for s in tokenize("5 days from now").symbols]
    ['n', 'T', 'o']
    """
    settings = settings or Settings()
    text = separate_digits(text or "")

    normal_in, normal_out = parse_normal(text, settings.MIN_NORMAL_LENGTH)
    kept = [
        (window, std) for window, std in zip(normal_out, normal_in)
        if not_subnormal(window, settings.MAX_REWRITE_PASSES)
    ]
    text = inject_normal(text, [w for w, _ in kept], [s for _, s in kept])

    text, subnormal_in, subnormal_out = parse_subnormal(text, settings.MAX_REWRITE_PASSES)
    text = RE_WHITESPACE.sub(" ", text).strip()

    words = [clean_token(token) for token in text.split()]

    # one token per symbol, two-word phrases joined
    tokens, symbols = [], []
    i = 0
    while i < len(words):
        one = make_symbol(words[i])
        phrase = f"{words[i]} {words[i + 1]}" if i + 1 < len(words) else None
        two = make_symbol(phrase) if phrase else None
        if one is not None and two is not None and getattr(two, "value", None) == getattr(one, "value", None):
            tokens.append(phrase)
            symbols.append(two)
            i += 2
        else:
            tokens.append(words[i])
            symbols.append(one)
            i += 1

    return TokenizedText(
        text=text,
        tokens=tokens,
        symbols=symbols,
        tokens_out=[w for w, _ in kept] + subnormal_out,
        tokens_in=[s for _, s in kept] + subnormal_in,
    )
