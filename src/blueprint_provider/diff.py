"""Field-level comparison of desired and current request bodies.

Both sides are REST-shaped payloads (``to_azure_payload``), so a plan shows
exactly what an update would send. Normalization removes differences that
are syntactic only:

- Empty equivalence: None, "", [] and {} are the same as a missing key
- Locations compare case- and whitespace-insensitively
- Lists of scalars (dependsOn, allowedValues, principalIds) are unordered
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .models import normalize_location

logger = logging.getLogger(__name__)

LOCATION_KEYS = frozenset({"location"})


@dataclass(frozen=True)
class FieldChange:
    """A single differing property.

    Attributes:
        path: Dotted property path, e.g. ``properties.parameters.env.defaultValue``.
        before: Current value (None when absent).
        after: Desired value (None when absent).
    """

    path: str
    before: Any
    after: Any

    def describe(self) -> str:
        if self.before is None:
            return f"+ {self.path} = {self.after!r}"
        if self.after is None:
            return f"- {self.path} (was {self.before!r})"
        return f"~ {self.path}: {self.before!r} -> {self.after!r}"


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _normalize(key: str, value: Any) -> Any:
    if _is_empty(value):
        return None
    if key in LOCATION_KEYS and isinstance(value, str):
        return normalize_location(value)
    if isinstance(value, list) and all(not isinstance(v, (dict, list)) for v in value):
        return sorted(value, key=repr)
    return value


def diff_payloads(
    desired: dict[str, Any], current: dict[str, Any], path: str = ""
) -> list[FieldChange]:
    """Compare two payloads and return the normalized differences.

    Args:
        desired: Body that would be sent.
        current: Body rebuilt from the state read back.
        path: Prefix for nested paths.

    Returns:
        Changes ordered by path.
    """
    changes: list[FieldChange] = []

    for key in sorted(set(desired) | set(current)):
        key_path = f"{path}.{key}" if path else key
        after = _normalize(key, desired.get(key))
        before = _normalize(key, current.get(key))

        if isinstance(after, dict) and isinstance(before, dict):
            changes.extend(diff_payloads(after, before, key_path))
        elif after != before:
            changes.append(FieldChange(path=key_path, before=before, after=after))

    return changes
