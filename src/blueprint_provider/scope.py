"""Blueprint scope validation and parsing.

A blueprint is anchored either at a subscription or at a management group:

    /subscriptions/{subscription-id}
    /providers/Microsoft.Management/managementGroups/{group-id}

Validation reports errors as messages (warnings, errors) so callers can
surface them as configuration diagnostics. Parsing is segment based: the
scope is recovered from a fully-qualified resource ID by path structure,
never by character offsets.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

SUBSCRIPTION_PREFIX = "/subscription"
SUBSCRIPTIONS_PREFIX = "/subscriptions"
MANAGEMENT_GROUP_PREFIX = "/providers/Microsoft.Management/managementGroups/"

# providers / Microsoft.Management / managementGroups / {group-id}
MANAGEMENT_GROUP_SEGMENT_COUNT = 4
SUBSCRIPTION_SEGMENT_COUNT = 2

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


class ScopeKind(str, Enum):
    """Where a blueprint is anchored."""

    SUBSCRIPTION = "subscription"
    MANAGEMENT_GROUP = "managementGroup"


class ScopeError(ValueError):
    """Base class for scope configuration errors."""

    def __init__(self, scope: str, errors: list[str]) -> None:
        self.scope = scope
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class MalformedScopeError(ScopeError):
    """Scope has a known shape but fails its structural checks."""

    pass


class UnrecognizedScopeError(ScopeError):
    """Scope matches neither the subscription nor the management group shape."""

    pass


class InvalidResourceIdError(ValueError):
    """Raised when a string is not a well-formed Azure resource ID."""

    pass


@dataclass(frozen=True)
class ResourceId:
    """A parsed Azure resource ID.

    Path segments are read as key/value pairs:
    /subscriptions/{sub}/resourceGroups/{rg}/providers/{namespace}/{type}/{name}
    """

    subscription_id: str
    resource_group: str | None = None
    provider: str | None = None
    path: dict[str, str] = field(default_factory=dict)


def is_valid_uuid(value: str) -> bool:
    """Return True if value is a UUID in 8-4-4-4-12 hex layout."""
    return bool(UUID_PATTERN.match(value))


def parse_resource_id(resource_id: str) -> ResourceId:
    """Parse an Azure resource ID into its key/value components.

    Args:
        resource_id: Resource ID such as
            ``/subscriptions/{sub}/resourceGroups/{rg}``.

    Returns:
        Parsed ResourceId.

    Raises:
        InvalidResourceIdError: If the ID is not made of key/value pairs or
            carries no subscription ID.
    """
    if not resource_id or not resource_id.startswith("/"):
        raise InvalidResourceIdError(f"Resource ID must start with '/': {resource_id!r}")

    components = resource_id.strip("/").split("/")
    if len(components) % 2 != 0:
        raise InvalidResourceIdError(
            f"The number of path segments is not divisible by 2 in {resource_id!r}"
        )

    path: dict[str, str] = {}
    for key, value in zip(components[::2], components[1::2]):
        if not key or not value:
            raise InvalidResourceIdError(
                f"Key/Value cannot be empty strings. Key: {key!r}, Value: {value!r}"
            )
        path[key] = value

    subscription_id = path.pop("subscriptions", None)
    if subscription_id is None:
        raise InvalidResourceIdError(f"No subscription ID found in: {resource_id!r}")

    # Keys after "providers" belong to the resource type, not the scope
    resource_group = path.pop("resourceGroups", None)
    provider = path.pop("providers", None)

    return ResourceId(
        subscription_id=subscription_id,
        resource_group=resource_group,
        provider=provider,
        path=path,
    )


def validate_resource_id(value: str, key: str) -> tuple[list[str], list[str]]:
    """Validate that value is a well-formed Azure resource ID."""
    warnings: list[str] = []
    errors: list[str] = []
    try:
        parse_resource_id(value)
    except InvalidResourceIdError as e:
        errors.append(f"Can't parse {key!r} as a resource id: {e}")
    return warnings, errors


def validate_blueprint_scope(value: str, key: str = "scope") -> tuple[list[str], list[str]]:
    """Validate a blueprint scope string.

    Exactly one of three branches fires:

    1. ``/subscription...``: the value must be a valid resource ID.
    2. ``/providers/Microsoft.Management/managementGroups/...``: four path
       segments, the last being a UUID.
    3. Anything else is an unrecognized shape.

    Args:
        value: The user-supplied scope string.
        key: Name of the configuration attribute, used in messages.

    Returns:
        Tuple of (warnings, errors). An empty error list means valid.
    """
    warnings: list[str] = []
    errors: list[str] = []

    if value.startswith(SUBSCRIPTION_PREFIX):
        _, id_errors = validate_resource_id(value, key)
        if id_errors:
            errors.append(f"Subscription specified is not a valid Resource ID: {key!r}")

    elif value.startswith(MANAGEMENT_GROUP_PREFIX):
        trimmed = value.removeprefix("/").removesuffix("/")
        components = trimmed.split("/")

        if len(components) != MANAGEMENT_GROUP_SEGMENT_COUNT:
            errors.append(
                f"Invalid management group path, should contain "
                f"{MANAGEMENT_GROUP_SEGMENT_COUNT} elements not {len(components)}"
            )
        elif not is_valid_uuid(components[3]):
            errors.append(f"Management group ID not a valid uuid: {components[3]!r}")

    else:
        errors.append(
            f"Invalid scope, should be a subscription resource ID or "
            f"Management Group path: {key!r}"
        )

    return warnings, errors


def classify_scope(value: str) -> ScopeKind | None:
    """Return the scope kind from its prefix, or None if unrecognized."""
    if value.startswith(SUBSCRIPTION_PREFIX):
        return ScopeKind.SUBSCRIPTION
    if value.startswith(MANAGEMENT_GROUP_PREFIX):
        return ScopeKind.MANAGEMENT_GROUP
    return None


def ensure_valid_scope(value: str, key: str = "scope") -> str:
    """Validate a scope and raise on failure.

    Returns:
        The scope, unchanged.

    Raises:
        UnrecognizedScopeError: If the scope matches neither known prefix.
        MalformedScopeError: If the scope fails structural checks.
    """
    _, errors = validate_blueprint_scope(value, key)
    if not errors:
        return value
    if classify_scope(value) is None:
        raise UnrecognizedScopeError(value, errors)
    raise MalformedScopeError(value, errors)


def parse_scope(fully_qualified_id: str) -> str:
    """Extract the blueprint scope from a fully-qualified resource ID.

    Examples:
        >>> parse_scope("/subscriptions/1111/providers/Microsoft.Blueprint/blueprints/bp")
        '/subscriptions/1111'
        >>> parse_scope("not-a-known-prefix")
        ''

    Returns:
        The subscription or management group prefix, or an empty string when
        the ID has neither shape or lacks the scope's segments.
    """
    if fully_qualified_id.startswith(SUBSCRIPTIONS_PREFIX):
        segment_count = SUBSCRIPTION_SEGMENT_COUNT
    elif fully_qualified_id.startswith(MANAGEMENT_GROUP_PREFIX):
        segment_count = MANAGEMENT_GROUP_SEGMENT_COUNT
    else:
        return ""

    segments = fully_qualified_id.strip("/").split("/")
    if len(segments) < segment_count or not all(segments[:segment_count]):
        return ""

    # "/subscriptionsX/..." shares the prefix but is not a subscription scope
    if segment_count == SUBSCRIPTION_SEGMENT_COUNT and segments[0] != "subscriptions":
        return ""

    return "/" + "/".join(segments[:segment_count])
