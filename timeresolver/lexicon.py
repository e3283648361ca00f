"""
Static word-to-concept lexicon and its classifier.

Every grammar category maps a canonical value to the list of words that
inflect to it. The first word of each list is the canonical form, used when
a reduced symbol is written back out as text for the scanner.

Category keys:
    op  arithmetic operator          n   number
    c   cron operator                t   absolute time unit (point in time)
    r   range operator               dt  displacement time unit
    f   frequency                    T   combined time, ``t:<units>,dt:<units>``
    o   origin operator

Unit values use the canonical unit letters ``y M w d h m s ms`` plus ``wd``
for a day of the week (0 = sunday). A value prefixed with ``=`` is a
structural default that anything more specific overrides.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional

CATEGORY_ORDER = ("op", "c", "r", "n", "t", "dt", "T", "f", "o")

_LEXICON = {
    "op": {
        "plus": ["plus", "and", "with", "+"],
        "minus": ["minus", "less", "-"],
        "times": ["times", "multiplied", "multiplied by", "*"],
        "divide": ["divide", "divided", "divided by", "/"],
    },
    "c": {
        "every": ["every", "each", "per"],
    },
    "r": {
        "to": ["to", "till", "until", "through", "thru"],
        "between": ["between"],
    },
    "n": {
        "0": ["zero"],
        "1": ["one", "a", "an"],
        "2": ["two"],
        "3": ["three"],
        "4": ["four"],
        "5": ["five"],
        "6": ["six"],
        "7": ["seven"],
        "8": ["eight"],
        "9": ["nine"],
        "10": ["ten"],
        "11": ["eleven"],
        "12": ["twelve", "dozen"],
    },
    "t": {
        "=0h": ["midnight"],
        "=12h": ["noon", "midday"],
    },
    "dt": {
        "1ms": ["millisecond", "ms", "msec", "msecs", "milliseconds"],
        "1s": ["second", "s", "sec", "secs", "seconds"],
        "1m": ["minute", "m", "min", "mins", "minutes"],
        "1h": ["hour", "h", "hr", "hrs", "hours"],
        "1d": ["day", "d", "days"],
        "1w": ["week", "w", "wk", "wks", "weeks"],
        "2w": ["fortnight", "fortnights"],
        "1M": ["month", "M", "mo", "mos", "months", "monthes"],
        "1y": ["year", "y", "yr", "yrs", "years"],
    },
    "T": {
        "t:,dt:0s": ["now"],
        "t:,dt:0d": ["today", "tdy"],
        "t:,dt:1d": ["tomorrow", "tmr", "tmrw", "tomorow", "tmw"],
        "t:,dt:-1d": ["yesterday", "ytd", "yday", "ystd"],
        "t:=19h,dt:": ["tonight", "night", "tonite"],
        "t:=17h,dt:": ["evening", "eve"],
        "t:=14h,dt:": ["afternoon", "arvo"],
        "t:=8h,dt:": ["morning", "morn"],
        "t:0wd,dt:": ["sunday", "sun"],
        "t:1wd,dt:": ["monday", "mon"],
        "t:2wd,dt:": ["tuesday", "tue", "tues"],
        "t:3wd,dt:": ["wednesday", "wed"],
        "t:4wd,dt:": ["thursday", "thu", "thur", "thurs"],
        "t:5wd,dt:": ["friday", "fri"],
        "t:6wd,dt:": ["saturday", "sat"],
        "t:1M,dt:": ["january", "jan"],
        "t:2M,dt:": ["february", "feb"],
        "t:3M,dt:": ["march", "mar"],
        "t:4M,dt:": ["april", "apr"],
        "t:5M,dt:": ["may"],
        "t:6M,dt:": ["june", "jun"],
        "t:7M,dt:": ["july", "jul"],
        "t:8M,dt:": ["august", "aug"],
        "t:9M,dt:": ["september", "sep", "sept"],
        "t:10M,dt:": ["october", "oct"],
        "t:11M,dt:": ["november", "nov"],
        "t:12M,dt:": ["december", "dec"],
    },
    "f": {
        "hourly": ["hourly"],
        "daily": ["daily"],
        "weekly": ["weekly"],
        "monthly": ["monthly"],
        "yearly": ["yearly", "annually"],
    },
    "o": {
        "plus": ["after", "from", "from now", "later", "later on", "in", "since", "starting"],
        "minus": ["before", "ago", "earlier", "prior"],
    },
}

LEXICON = MappingProxyType(
    {name: MappingProxyType({k: tuple(v) for k, v in table.items()}) for name, table in _LEXICON.items()}
)

# word -> (category, value, canon), first category in CATEGORY_ORDER wins
_INDEX = {}
for _category in CATEGORY_ORDER:
    for _value, _inflections in LEXICON[_category].items():
        for _word in _inflections:
            _INDEX.setdefault(_word, (_category, _value, _inflections[0]))


@dataclass(frozen=True)
class Lemma:
    """The grammar category, canonical value and canonical word of a lexicon entry."""
    category: str
    value: str
    canon: str


def normalize_word(word: str) -> str:
    # "M" is the only case-sensitive entry: month, as opposed to "m" minute
    return word if word == "M" else word.lower()


def classify(word: str) -> Optional[Lemma]:
    """Look a word or phrase up in the lexicon.

    Returns ``None`` when the word has no grammatical role.

    >>> classify("Tomorrow")
    Lemma(category='T', value='t:,dt:1d', canon='tomorrow')
    """
    if not isinstance(word, str):
        return None
    entry = _INDEX.get(normalize_word(word))
    if entry is None:
        return None
    return Lemma(*entry)
