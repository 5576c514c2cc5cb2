"""
Instance codec.

Coerces raw values into the five canonical feature types and maps rows
between storage documents, typed instances and the JSON wire format.

Every function here is total: malformed input degrades to ``None`` or a
type-appropriate default and nothing raises.
"""

from __future__ import annotations

import datetime
import json
import math
from collections.abc import Mapping, Sequence
from typing import Any, Union

from .features import Feature, FeatureType

InstanceValue = Union[str, int, float, bool, datetime.datetime, None]
Instance = list[InstanceValue]

NOMINAL_MAX_LENGTH = 255

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


# ---------------------------------------------------------------------------
# Stringification
# ---------------------------------------------------------------------------


def format_datetime(value: datetime.datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    utc = _as_utc(value)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def stringify(value: Any) -> str:
    """
    Text form of a raw value, as the remote consumer's string concatenation
    renders it: ``true``/``false`` for booleans, integral floats without a
    fractional part, comma-joined lists.
    """
    if value is None:
        return "null"
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime.datetime):
        return format_datetime(value)
    if isinstance(value, datetime.date):
        return value.isoformat()
    # Nesting too deep to render reads as the empty string.
    if isinstance(value, (list, tuple)):
        try:
            return ",".join("" if v is None else stringify(v) for v in value)
        except RecursionError:
            return ""
    if isinstance(value, Mapping):
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except RecursionError:
            return ""
        except (TypeError, ValueError):
            return str(value)
    return str(value)


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def _as_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


def _to_number(raw: Any) -> int | float | None:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        number: int | float = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not text or "_" in text:
            return None
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
    elif isinstance(raw, datetime.datetime):
        return int(_as_utc(raw).timestamp() * 1000)
    else:
        return None
    if isinstance(number, float) and not math.isfinite(number):
        return None
    return number


def _truthy(raw: Any) -> bool:
    # Containers are truthy even when empty; only scalars can be falsy.
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return raw != 0 and not (isinstance(raw, float) and math.isnan(raw))
    if isinstance(raw, str):
        return len(raw) > 0
    return True


def _to_logic(raw: Any) -> bool:
    if raw in ("true", "1"):
        return True
    if raw in ("false", "0"):
        return False
    return _truthy(raw)


def _to_date(raw: Any) -> datetime.datetime:
    try:
        if isinstance(raw, datetime.datetime):
            return _as_utc(raw)
        if isinstance(raw, datetime.date):
            return datetime.datetime(
                raw.year, raw.month, raw.day, tzinfo=datetime.timezone.utc
            )
        if isinstance(raw, (int, float)):
            return EPOCH + datetime.timedelta(milliseconds=raw)
        if isinstance(raw, str):
            parsed = datetime.datetime.fromisoformat(
                raw.strip().replace("Z", "+00:00")
            )
            return _as_utc(parsed)
    except (ValueError, OverflowError, TypeError):
        return EPOCH
    return EPOCH


def coerce(raw: Any, feature_type: FeatureType | str) -> InstanceValue:
    """
    Coerce *raw* into the canonical value for *feature_type*.

    ``None`` always coerces to ``None``. Otherwise:

    - ``nominal``: text, truncated to 255 characters
    - ``text``: text
    - ``numeric``: a number, or ``None`` when *raw* is not numeric
    - ``logic``: ``"true"``/``"1"`` and ``"false"``/``"0"``, else truthiness
    - ``date``: a UTC datetime, or the epoch when *raw* cannot be parsed
    """
    if raw is None:
        return None
    kind = FeatureType.parse(feature_type)
    if kind is FeatureType.NOMINAL:
        return stringify(raw)[:NOMINAL_MAX_LENGTH]
    if kind is FeatureType.NUMERIC:
        return _to_number(raw)
    if kind is FeatureType.LOGIC:
        return _to_logic(raw)
    if kind is FeatureType.DATE:
        return _to_date(raw)
    return stringify(raw)


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------


def decode_document(
    document: Mapping[str, Any], features: Sequence[Feature]
) -> Instance:
    """Read a stored document into an instance aligned to *features*."""
    return [coerce(document.get(f.name), f.type) for f in features]


def encode_document(
    instance: Sequence[InstanceValue], features: Sequence[Feature]
) -> dict[str, Any]:
    """Map an instance onto a storage document keyed by feature name."""
    return {
        f.name: instance[f.index] if f.index < len(instance) else None
        for f in features
    }


def sanitize_instances(raw: Any, features: Sequence[Feature]) -> list[Instance]:
    """
    Coerce a caller-supplied list of row objects into instances.

    Non-list input yields no instances; rows that are not objects are read
    as empty objects, so every field takes its null/default value.
    """
    if not isinstance(raw, list):
        return []
    return [
        decode_document(row if isinstance(row, Mapping) else {}, features)
        for row in raw
    ]


def to_json_value(value: InstanceValue) -> Any:
    """JSON-safe form of an instance value (datetimes become ISO strings)."""
    if isinstance(value, datetime.datetime):
        return format_datetime(value)
    return value


def encode_instance(instance: Sequence[InstanceValue]) -> list[Any]:
    """Wire form of one instance: an ordered JSON array."""
    return [to_json_value(v) for v in instance]
