__version__ = "1.0.0"

from tzlocal import get_localzone

from .conf import Settings, SettingValidationError, apply_settings
from .date import DateAccumulator, local_now
from .lexicon import LEXICON, Lemma, classify
from .normalizer import NormalizedText, normalize
from .parser import Parser
from .symbols import (
    Cron,
    CronResult,
    Frequency,
    GrammarSymbol,
    Number,
    Operator,
    Origin,
    Range,
    RangeResult,
    SymbolKind,
    Time,
    UnitMap,
    make_symbol,
)
from .tokenizer import TokenizedText, tokenize


@apply_settings
def resolve(text, reference=None, settings=None):
    """Resolve a natural language time expression to a datetime.

    :param text:
        The expression, e.g. ``"next monday at 9am"`` or ``"5 days and 2 hours"``.
    :type text: str

    :param reference:
        The instant relative expressions are resolved against. A string is
        resolved against the current time first. Defaults to the current
        local time.
    :type reference: datetime, str or None

    :param settings:
        Configure customized behavior using settings defined in :mod:`timeresolver.conf.Settings`.
    :type settings: dict

    :return: The resolved datetime. When ``text`` holds no time expression
        the reference itself is returned.
    :rtype: datetime

    :raises:
        ``SettingValidationError``: A provided setting is not valid.

    Example usage::

        >>> import timeresolver
        >>> from datetime import datetime
        >>> timeresolver.resolve("next monday at 1:00am", datetime(2013, 5, 13, 1, 30))
        datetime.datetime(2013, 5, 20, 1, 0)
        >>> timeresolver.resolve("invalid", datetime(2013, 5, 13, 1, 30))
        datetime.datetime(2013, 5, 13, 1, 30)
    """
    if isinstance(reference, str):
        reference = resolve(reference, settings=settings)
    elif reference is None:
        reference = local_now()

    result = Parser.parse(text, reference, settings)

    if settings.RETURN_AS_TIMEZONE_AWARE and result.tzinfo is None:
        result = result.replace(tzinfo=get_localzone())
    return result
