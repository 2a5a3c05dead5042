"""Small helpers shared by the analysis and reporting modules."""
from __future__ import annotations

import datetime
import math
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Optional


def round_half_up(value: float) -> int:
    """Round *value* to the nearest integer, halves away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(0.5) == 0``); the
    dashboard percentages have always been rounded half up.
    """
    return int(math.floor(value + 0.5))


def safe_ratio(numerator: float, denominator: float) -> float:
    """Return ``numerator / denominator`` or ``0.0`` when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator / denominator


def percentage(part: float, whole: float) -> int:
    """Return *part* as a rounded percentage of *whole* (0 for an empty whole)."""
    return round_half_up(safe_ratio(part, whole) * 100)


def parse_day(value: Optional[str]) -> Optional[datetime.date]:
    """Return the calendar day of an ISO-8601 date or timestamp string.

    Only the ``YYYY-MM-DD`` prefix is considered. ``None`` is returned for
    missing or unparseable input.
    """
    if not value:
        return None
    try:
        return datetime.date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def day_key(timestamp: str) -> str:
    """Return the date portion (``YYYY-MM-DD``) of an ISO-8601 timestamp."""
    return timestamp.split("T", 1)[0]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_wire(value: Any) -> Any:
    """Convert result dataclasses into JSON-ready structures.

    Dataclass field names become camelCase and ``None`` fields are dropped.
    Dictionary keys are data (dates, task names, theme ids) and are kept
    verbatim. Domain objects with their own ``to_dict`` (submissions) are
    serialized by it.
    """
    if not isinstance(value, (WireModel, type)) and callable(getattr(value, "to_dict", None)):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        out: Dict[str, Any] = {}
        for f in fields(value):
            item = getattr(value, f.name)
            if item is None:
                continue
            out[_camel(f.name)] = to_wire(item)
        return out
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value


class WireModel:
    """Mixin giving result dataclasses a ``to_dict`` for JSON serialization."""

    __slots__ = ()

    def to_dict(self) -> Dict[str, Any]:  # noqa: D401 – simple helper
        """Return a *plain* ``dict`` with camelCase keys."""
        return to_wire(self)
