"""Feature schema: the typed, ordered columns of the source collection."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


class FeatureType(str, Enum):
    """Declared type of a feature."""

    NOMINAL = "nominal"
    TEXT = "text"
    NUMERIC = "numeric"
    LOGIC = "logic"
    DATE = "date"

    @classmethod
    def parse(cls, value: Any) -> FeatureType:
        """Parse a type name; missing or unrecognised names become ``TEXT``."""
        if isinstance(value, FeatureType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.TEXT


@dataclass(frozen=True)
class Feature:
    """A named, typed column. ``name`` is the storage field key."""

    index: int
    name: str
    type: FeatureType

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "name": self.name, "type": self.type.value}


class FeatureSchema(Sequence[Feature]):
    """
    Immutable, ordered list of features.

    The order is the contract shared with the remote consumer: every
    instance is a list of values aligned to it.
    """

    def __init__(self, features: Iterable[Feature]) -> None:
        self._features: tuple[Feature, ...] = tuple(features)

    @classmethod
    def from_names(
        cls,
        names: Sequence[str],
        types: Sequence[str | FeatureType | None] = (),
    ) -> FeatureSchema:
        """Build a schema from parallel lists of names and type names."""
        return cls(
            Feature(
                index=i,
                name=name,
                type=FeatureType.parse(types[i] if i < len(types) else None),
            )
            for i, name in enumerate(names)
        )

    # -- sequence protocol ---------------------------------------------------

    def __getitem__(self, index: Any) -> Any:
        return self._features[index]

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self._features)

    def __repr__(self) -> str:
        return f"FeatureSchema({list(self._features)!r})"

    # -- lookup --------------------------------------------------------------

    def get(self, index: Any) -> Feature | None:
        """Return the feature at *index*, or ``None`` if it does not exist.

        Negative indices and non-integers never resolve.
        """
        if isinstance(index, bool) or not isinstance(index, int):
            return None
        if 0 <= index < len(self._features):
            return self._features[index]
        return None

    @property
    def names(self) -> list[str]:
        return [f.name for f in self._features]

    def to_list(self) -> list[dict[str, Any]]:
        return [f.to_dict() for f in self._features]

    # -- projection ----------------------------------------------------------

    def sanitize_projection(self, raw: Any) -> list[int]:
        """
        Turn a projection request into a list of valid feature indices.

        *raw* is either a comma-separated string (``"0,2,3"``) or a sequence.
        Each entry is parsed leniently as a leading integer; entries that
        are not integers, are negative or do not index a feature are dropped.
        """
        if not raw:
            return []
        if isinstance(raw, str):
            items: list[Any] = raw.split(",")
        elif isinstance(raw, (list, tuple)):
            items = list(raw)
        else:
            return []

        result: list[int] = []
        for item in items:
            index = _parse_leading_int(item)
            if index is not None and self.get(index) is not None:
                result.append(index)
        return result

    def project(self, indices: Sequence[int]) -> list[Feature]:
        """Return the features selected by *indices*, skipping invalid ones."""
        selected = []
        for index in indices:
            feature = self.get(index)
            if feature is not None:
                selected.append(feature)
        return selected


def _parse_leading_int(item: Any) -> int | None:
    if isinstance(item, bool):
        return None
    if isinstance(item, int):
        return item
    if isinstance(item, float):
        return int(item) if math.isfinite(item) else None
    m = _LEADING_INT_RE.match(str(item))
    return int(m.group(1)) if m else None
