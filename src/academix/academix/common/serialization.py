from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


def to_dict(instance: Any) -> dict:
    """Plain JSON-ready dict for a domain dataclass.

    Enums become their values and dates become ISO strings; nested dataclasses
    and sequences are converted recursively.
    """

    output = {}
    for f in fields(instance):
        output[f.name] = to_plain(getattr(instance, f.name))
    return output


def to_plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value
