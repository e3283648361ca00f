from copy import deepcopy
from functools import wraps

DEFAULT_DAYPART_HOURS = {
    "am": 7,
    "pm": 12,
    "morning": 8,
    "afternoon": 14,
    "evening": 17,
    "tonight": 19,
    "noon": 12,
    "midnight": 0,
}

settings = {
    "MIN_NORMAL_LENGTH": 7,
    "MAX_REWRITE_PASSES": 64,
    "ROLLOVER_THRESHOLD": 60,
    "RETURN_AS_TIMEZONE_AWARE": False,
    "DEFAULT_DAYPART_HOURS": DEFAULT_DAYPART_HOURS,
}


class SettingValidationError(ValueError):
    pass


class Settings:
    """Control and configure default parsing behavior of timeresolver.

    Currently, supported settings are:

    * `MIN_NORMAL_LENGTH`
    * `MAX_REWRITE_PASSES`
    * `ROLLOVER_THRESHOLD`
    * `RETURN_AS_TIMEZONE_AWARE`
    * `DEFAULT_DAYPART_HOURS`
    """

    _default = True

    def __init__(self, settings=None):
        if settings:
            self._updateall(settings.items())
        else:
            self._updateall(deepcopy(globals()["settings"]).items())

    def _updateall(self, iterable):
        for key, value in iterable:
            setattr(self, key, value)

    def replace(self, mod_settings=None, **kwds):
        for k, v in kwds.items():
            if v is None:
                raise TypeError('Invalid {{"{}": {}}}'.format(k, v))

        for x in self._get_settings_from_pyfile().keys():
            kwds.setdefault(x, getattr(self, x))

        kwds["_default"] = False
        if mod_settings:
            kwds["_mod_settings"] = mod_settings

        return self.__class__(settings=kwds)

    def _get_settings_from_pyfile(self):
        return deepcopy(globals()["settings"])

    def get(self, key, default=None):
        return getattr(self, key, default)


def apply_settings(f):
    """Turn a ``settings`` keyword argument given as a dict into a :class:`Settings`."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        mod_settings = kwargs.get("settings")

        kwargs["settings"] = mod_settings or Settings()

        if isinstance(kwargs["settings"], dict):
            check_settings(kwargs["settings"])
            kwargs["settings"] = Settings().replace(
                mod_settings=mod_settings, **kwargs["settings"]
            )

        if not isinstance(kwargs["settings"], Settings):
            raise TypeError(
                "settings can only be either dict or instance of Settings class"
            )

        return f(*args, **kwargs)

    return wrapper


def _check_positive_int(setting_name, setting_value):
    if isinstance(setting_value, bool) or setting_value < 1:
        raise SettingValidationError(
            f'"{setting_name}" must be a positive integer, got {setting_value!r}'
        )


def _check_daypart_hours(setting_name, setting_value):
    unknown = set(setting_value) - set(DEFAULT_DAYPART_HOURS)
    if unknown:
        raise SettingValidationError(
            f'"{setting_name}" has unknown day parts: {", ".join(sorted(unknown))}'
        )
    for part, hour in setting_value.items():
        if not isinstance(hour, int) or isinstance(hour, bool) or not 0 <= hour <= 23:
            raise SettingValidationError(
                f'"{setting_name}" hour for "{part}" must be an int between 0 and 23'
            )


def check_settings(settings):
    """
    Check if provided settings are valid, if not it raises `SettingValidationError`.
    Only checks for the modified settings.
    """
    settings_values = {
        "MIN_NORMAL_LENGTH": {
            "type": int,
            "extra_check": _check_positive_int,
        },
        "MAX_REWRITE_PASSES": {
            "type": int,
            "extra_check": _check_positive_int,
        },
        "ROLLOVER_THRESHOLD": {
            "type": int,
        },
        "RETURN_AS_TIMEZONE_AWARE": {
            "type": bool,
        },
        "DEFAULT_DAYPART_HOURS": {
            "type": dict,
            "extra_check": _check_daypart_hours,
        },
    }

    modified_settings = settings  # check only modified settings

    # check settings keys:
    for setting in modified_settings:
        if setting not in settings_values:
            raise SettingValidationError('"{}" is not a valid setting'.format(setting))

    for setting_name, setting_value in modified_settings.items():
        setting_type = type(setting_value)
        setting_props = settings_values[setting_name]

        # check type:
        if not setting_type == setting_props["type"]:
            raise SettingValidationError(
                '"{}" must be "{}", not "{}".'.format(
                    setting_name, setting_props["type"].__name__, setting_type.__name__
                )
            )

        # check values:
        extra_check = setting_props.get("extra_check")
        if extra_check:
            extra_check(setting_name, setting_value)
