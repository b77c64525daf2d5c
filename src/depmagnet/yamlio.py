"""YAML reading that keeps every scalar exactly as written.

Build settings such as ``YES`` and version strings such as ``1.10`` must not
be turned into booleans or floats, so configs are loaded with PyYAML's
``BaseLoader`` and the few non-string fields are converted here.
"""

from __future__ import annotations

import yaml

_NULLS = frozenset({"", "~", "null", "Null", "NULL"})
_TRUE = frozenset({"true", "yes", "on"})
_FALSE = frozenset({"false", "no", "off"})


def load(stream):
    """Parse *stream* with every scalar left as a ``str``."""
    return yaml.load(stream, Loader=yaml.BaseLoader)


def is_null(value) -> bool:
    return value is None or (isinstance(value, str) and value in _NULLS)


def optional(data: dict, key: str):
    """Return ``data[key]``, or None when it is absent or a YAML null."""
    value = data.get(key)
    return None if is_null(value) else value


def optional_str(data: dict, key: str) -> str | None:
    value = optional(data, key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be of type str")
    return value


def optional_bool(data: dict, key: str) -> bool | None:
    value = optional(data, key)
    if value is None:
        return None
    if isinstance(value, str):
        if value.lower() in _TRUE:
            return True
        if value.lower() in _FALSE:
            return False
    raise ValueError(f"{key} must be of type bool")
