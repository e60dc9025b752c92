"""Pydantic models for blueprint desired state and flattened API state.

These models provide:
1. Type-safe manifest parsing
2. Validation at the boundary (fail fast, fail loudly)
3. Expansion into Blueprint REST request bodies (``to_azure_payload``)
4. Flattening of REST responses back into state (``from_azure``)
"""

from __future__ import annotations

import base64
import json
import re
from abc import abstractmethod
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .config import MAX_ARTIFACT_NAME_LENGTH, MAX_BLUEPRINT_NAME_LENGTH
from .scope import parse_scope, validate_blueprint_scope

BLUEPRINT_RESOURCE_TYPE = "Microsoft.Blueprint/blueprints"

# Artifact parameters referencing a blueprint parameter are sent as an ARM expression
PARAMETER_REFERENCE_PATTERN = re.compile(r"^\[parameters\('([^']+)'\)\]$")


class ParameterType(str, Enum):
    """Blueprint template parameter types."""

    ARRAY = "array"
    BOOL = "bool"
    INT = "int"
    OBJECT = "object"
    SECURE_OBJECT = "secureObject"
    SECURE_STRING = "secureString"
    STRING = "string"


class TargetScope(str, Enum):
    """Scope a blueprint can be assigned to."""

    SUBSCRIPTION = "subscription"
    MANAGEMENT_GROUP = "managementGroup"


class ArtifactKind(str, Enum):
    """Blueprint artifact kinds."""

    TEMPLATE = "template"
    POLICY_ASSIGNMENT = "policyAssignment"
    ROLE_ASSIGNMENT = "roleAssignment"


TEXT_PARAMETER_TYPES = frozenset({ParameterType.STRING, ParameterType.SECURE_STRING})


# =============================================================================
# Helpers
# =============================================================================


def normalize_location(location: str) -> str:
    """Normalize an Azure region name ("West Europe" -> "westeurope")."""
    return location.replace(" ", "").lower()


def check_scope(value: str, key: str = "scope") -> str:
    """Field validator body shared by every resource carrying a scope."""
    _, errors = validate_blueprint_scope(value, key)
    if errors:
        raise ValueError("; ".join(errors))
    return value


def blueprint_address(scope: str | None, name: str) -> str:
    """Address of a blueprint, unique across scopes."""
    return f"{scope or ''}/blueprint/{name}"


def artifact_address(scope: str | None, blueprint_name: str, name: str) -> str:
    return f"{blueprint_address(scope, blueprint_name)}/artifact/{name}"


def _require_non_empty(values: list[str], field_name: str) -> list[str]:
    for item in values:
        if not item or not item.strip():
            raise ValueError(f"{field_name} must not contain empty strings")
    return values


def _require_unique_names(items: list[Any], field_name: str) -> None:
    seen: set[str] = set()
    for item in items:
        if item.name in seen:
            raise ValueError(f"duplicate {field_name} name: {item.name!r}")
        seen.add(item.name)


def _metadata_payload(display_name: str | None, description: str | None) -> dict[str, Any]:
    metadata: dict[str, Any] = {}
    if display_name is not None:
        metadata["displayName"] = display_name
    if description is not None:
        metadata["description"] = description
    return metadata


def decode_default_value(param_type: ParameterType, encoded: str) -> Any:
    """Decode a base64 default value into the value sent to the API.

    Text types decode to a string, arrays to a list split on commas (with
    optional surrounding brackets), all other types are parsed as JSON.

    Raises:
        ValueError: If the value is not valid base64, UTF-8 or JSON.
    """
    raw = base64.b64decode(encoded, validate=True).decode("utf-8")

    if param_type in TEXT_PARAMETER_TYPES:
        return raw

    if param_type == ParameterType.ARRAY:
        stripped = raw.strip().strip("[]")
        if not stripped:
            return []
        return [item.strip() for item in stripped.split(",")]

    return json.loads(raw)


def encode_default_value(param_type: ParameterType, value: Any) -> str | None:
    """Encode an API default value back into its base64 configuration form."""
    if value is None:
        return None

    if param_type in TEXT_PARAMETER_TYPES:
        text = str(value)
    elif param_type == ParameterType.ARRAY and isinstance(value, list):
        text = ",".join(str(item) for item in value)
    else:
        text = json.dumps(value)

    return base64.b64encode(text.encode("utf-8")).decode("ascii")


# =============================================================================
# Blueprint
# =============================================================================


class BlueprintParameter(BaseModel):
    """A blueprint parameter definition.

    ``default_value`` is base64 encoded for every parameter type.
    """

    model_config = {"extra": "forbid"}

    name: Annotated[str, Field(min_length=1)]
    type: ParameterType
    default_value: str | None = None
    allowed_values: list[Any] = Field(default_factory=list)
    display_name: str | None = None
    description: str | None = None

    @model_validator(mode="after")
    def validate_default_value(self) -> BlueprintParameter:
        if self.default_value is not None:
            try:
                decode_default_value(self.type, self.default_value)
            except ValueError as e:
                raise ValueError(
                    f"default_value of parameter {self.name!r} must be base64 encoded "
                    f"{self.type.value}: {e}"
                ) from e
        return self

    def to_azure_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": self.type.value,
            "metadata": _metadata_payload(self.display_name, self.description),
        }
        if self.default_value is not None:
            body["defaultValue"] = decode_default_value(self.type, self.default_value)
        if self.allowed_values:
            body["allowedValues"] = list(self.allowed_values)
        return body

    @classmethod
    def from_azure(cls, name: str, data: dict[str, Any]) -> BlueprintParameter:
        metadata = data.get("metadata") or {}
        param_type = ParameterType(data.get("type", ParameterType.STRING.value))
        return cls(
            name=name,
            type=param_type,
            default_value=encode_default_value(param_type, data.get("defaultValue")),
            allowed_values=data.get("allowedValues") or [],
            display_name=metadata.get("displayName"),
            description=metadata.get("description"),
        )


class ResourceGroupDefinition(BaseModel):
    """A resource group placeholder declared by a blueprint."""

    model_config = {"extra": "forbid"}

    name: Annotated[str, Field(min_length=1, max_length=90)]
    location: str | None = None
    display_name: str | None = None
    description: str | None = None
    tags: dict[str, str] = Field(default_factory=dict)
    depends_on: list[str] = Field(default_factory=list)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str | None) -> str | None:
        return normalize_location(v) if v else v

    @field_validator("depends_on")
    @classmethod
    def validate_depends_on(cls, v: list[str]) -> list[str]:
        return _require_non_empty(v, "depends_on")

    def to_azure_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": self.name,
            "metadata": _metadata_payload(self.display_name, self.description),
        }
        if self.location:
            body["location"] = self.location
        if self.tags:
            body["tags"] = dict(self.tags)
        if self.depends_on:
            body["dependsOn"] = list(self.depends_on)
        return body

    @classmethod
    def from_azure(cls, key: str, data: dict[str, Any]) -> ResourceGroupDefinition:
        metadata = data.get("metadata") or {}
        return cls(
            name=data.get("name") or key,
            location=data.get("location"),
            display_name=metadata.get("displayName"),
            description=metadata.get("description"),
            tags=data.get("tags") or {},
            depends_on=data.get("dependsOn") or [],
        )


class BlueprintStatus(BaseModel):
    """Computed status returned by the API."""

    time_created: str | None = None
    last_modified: str | None = None

    @classmethod
    def from_azure(cls, data: dict[str, Any] | None) -> BlueprintStatus | None:
        if not data:
            return None
        return cls(
            time_created=_as_text(data.get("timeCreated")),
            last_modified=_as_text(data.get("lastModified")),
        )


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


class BlueprintProperties(BaseModel):
    """Blueprint definition properties."""

    model_config = {"extra": "forbid"}

    display_name: Annotated[str, Field(min_length=1)]
    description: str | None = None
    target_scope: TargetScope
    parameters: list[BlueprintParameter] = Field(default_factory=list)
    resource_groups: list[ResourceGroupDefinition] = Field(default_factory=list)
    versions: list[str] = Field(default_factory=list)

    @field_validator("versions")
    @classmethod
    def validate_versions(cls, v: list[str]) -> list[str]:
        return _require_non_empty(v, "versions")

    @model_validator(mode="after")
    def validate_unique_names(self) -> BlueprintProperties:
        _require_unique_names(self.parameters, "parameter")
        _require_unique_names(self.resource_groups, "resource group")
        return self

    def to_azure_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "displayName": self.display_name,
            "targetScope": self.target_scope.value,
            "parameters": {p.name: p.to_azure_payload() for p in self.parameters},
            "resourceGroups": {rg.name: rg.to_azure_payload() for rg in self.resource_groups},
            "layout": {},
            "versions": {},
        }
        if self.description is not None:
            body["description"] = self.description
        return body

    @classmethod
    def from_azure(cls, data: dict[str, Any]) -> BlueprintProperties:
        parameters = data.get("parameters") or {}
        resource_groups = data.get("resourceGroups") or {}
        versions = data.get("versions") or {}
        return cls(
            display_name=data.get("displayName") or "",
            description=data.get("description"),
            target_scope=TargetScope(data.get("targetScope", TargetScope.SUBSCRIPTION.value)),
            parameters=[
                BlueprintParameter.from_azure(name, value)
                for name, value in sorted(parameters.items())
            ],
            resource_groups=[
                ResourceGroupDefinition.from_azure(key, value)
                for key, value in sorted(resource_groups.items())
            ],
            versions=sorted(versions) if isinstance(versions, dict) else list(versions),
        )


class BlueprintSpec(BaseModel):
    """Desired state of a blueprint definition."""

    model_config = {"extra": "forbid"}

    name: Annotated[str, Field(min_length=1, max_length=MAX_BLUEPRINT_NAME_LENGTH)]
    scope: str
    type: str = BLUEPRINT_RESOURCE_TYPE
    properties: BlueprintProperties | None = None

    @field_validator("scope")
    @classmethod
    def validate_scope(cls, v: str) -> str:
        return check_scope(v)

    @field_validator("properties")
    @classmethod
    def validate_target_scope(cls, v: BlueprintProperties | None) -> BlueprintProperties | None:
        # Reserved for future use, currently rejected by the API
        if v is not None and v.target_scope == TargetScope.MANAGEMENT_GROUP:
            raise ValueError("target_scope must be 'subscription'")
        return v

    @property
    def address(self) -> str:
        return blueprint_address(self.scope, self.name)

    def to_azure_payload(self) -> dict[str, Any]:
        """Expand into a Blueprint create-or-update request body."""
        properties = (
            self.properties.to_azure_payload()
            if self.properties
            else {"layout": {}, "versions": {}}
        )
        return {"name": self.name, "type": self.type, "properties": properties}


class BlueprintState(BaseModel):
    """Blueprint as read back from the API."""

    id: str | None = None
    name: str
    type: str | None = None
    scope: str
    properties: BlueprintProperties | None = None
    status: BlueprintStatus | None = None

    @classmethod
    def from_azure(cls, scope: str | None, data: dict[str, Any]) -> BlueprintState:
        """Flatten a Blueprint API response.

        Args:
            scope: Scope the blueprint was read from. When None, it is
                recovered from the returned resource ID.
            data: Response body.
        """
        properties = data.get("properties") or {}
        # A blueprint created without a properties block only carries
        # computed fields, which cannot form a BlueprintProperties
        has_properties = bool(properties.get("displayName"))
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            type=data.get("type"),
            scope=scope or parse_scope(data.get("id") or ""),
            properties=BlueprintProperties.from_azure(properties) if has_properties else None,
            status=BlueprintStatus.from_azure(properties.get("status")),
        )

    def to_spec(self) -> BlueprintSpec:
        """Current state in desired-state shape, for diffing."""
        return BlueprintSpec.model_construct(
            name=self.name,
            scope=self.scope,
            type=self.type or BLUEPRINT_RESOURCE_TYPE,
            properties=self.properties,
        )


# =============================================================================
# Artifacts
# =============================================================================


class ArtifactParameter(BaseModel):
    """An artifact parameter: a literal value or a blueprint parameter reference."""

    model_config = {"extra": "forbid"}

    name: Annotated[str, Field(min_length=1)]
    value: Any = None
    reference: str | None = None

    @model_validator(mode="after")
    def validate_value_or_reference(self) -> ArtifactParameter:
        has_value = "value" in self.model_fields_set
        has_reference = self.reference is not None
        if has_value == has_reference:
            raise ValueError(
                f"parameter {self.name!r} needs exactly one of 'value' or 'reference'"
            )
        return self

    def to_azure_payload(self) -> dict[str, Any]:
        if self.reference is not None:
            return {"value": f"[parameters('{self.reference}')]"}
        return {"value": self.value}

    @classmethod
    def from_azure(cls, name: str, data: dict[str, Any]) -> ArtifactParameter:
        value = data.get("value")
        if isinstance(value, str):
            match = PARAMETER_REFERENCE_PATTERN.match(value)
            if match:
                return cls(name=name, reference=match.group(1))
        return cls(name=name, value=value)


def _parameters_payload(parameters: list[ArtifactParameter]) -> dict[str, Any]:
    return {p.name: p.to_azure_payload() for p in parameters}


def _parameters_from_azure(data: dict[str, Any] | None) -> list[ArtifactParameter]:
    return [ArtifactParameter.from_azure(name, value or {}) for name, value in sorted((data or {}).items())]


class ArtifactProperties(BaseModel):
    """Properties shared by every artifact kind."""

    model_config = {"extra": "forbid"}

    display_name: str | None = None
    description: str | None = None
    depends_on: list[str] = Field(default_factory=list)
    resource_group: str | None = None

    @field_validator("depends_on")
    @classmethod
    def validate_depends_on(cls, v: list[str]) -> list[str]:
        return _require_non_empty(v, "depends_on")

    def _common_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.display_name is not None:
            body["displayName"] = self.display_name
        if self.description is not None:
            body["description"] = self.description
        if self.depends_on:
            body["dependsOn"] = list(self.depends_on)
        if self.resource_group:
            body["resourceGroup"] = self.resource_group
        return body

    @staticmethod
    def _common_fields(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "display_name": data.get("displayName"),
            "description": data.get("description"),
            "depends_on": data.get("dependsOn") or [],
            "resource_group": data.get("resourceGroup"),
        }

    @abstractmethod
    def to_azure_payload(self) -> dict[str, Any]:
        """Expand into the ``properties`` of an artifact request body."""

    @classmethod
    @abstractmethod
    def from_azure(cls, data: dict[str, Any]) -> ArtifactProperties:
        """Flatten the ``properties`` of an artifact response."""


class TemplateArtifactProperties(ArtifactProperties):
    """ARM template artifact."""

    template: dict[str, Any]
    parameters: list[ArtifactParameter] = Field(default_factory=list)

    @field_validator("template", mode="before")
    @classmethod
    def parse_template(cls, v: Any) -> Any:
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError(f"template is not valid JSON: {e}") from e
        return v

    @model_validator(mode="after")
    def validate_unique_parameters(self) -> TemplateArtifactProperties:
        _require_unique_names(self.parameters, "parameter")
        return self

    def to_azure_payload(self) -> dict[str, Any]:
        body = self._common_payload()
        body["template"] = self.template
        body["parameters"] = _parameters_payload(self.parameters)
        return body

    @classmethod
    def from_azure(cls, data: dict[str, Any]) -> TemplateArtifactProperties:
        return cls(
            **cls._common_fields(data),
            template=data.get("template") or {},
            parameters=_parameters_from_azure(data.get("parameters")),
        )


class PolicyAssignmentArtifactProperties(ArtifactProperties):
    """Policy assignment artifact."""

    policy_definition_id: Annotated[str, Field(min_length=1)]
    parameters: list[ArtifactParameter] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_parameters(self) -> PolicyAssignmentArtifactProperties:
        _require_unique_names(self.parameters, "parameter")
        return self

    def to_azure_payload(self) -> dict[str, Any]:
        body = self._common_payload()
        body["policyDefinitionId"] = self.policy_definition_id
        body["parameters"] = _parameters_payload(self.parameters)
        return body

    @classmethod
    def from_azure(cls, data: dict[str, Any]) -> PolicyAssignmentArtifactProperties:
        return cls(
            **cls._common_fields(data),
            policy_definition_id=data.get("policyDefinitionId") or "",
            parameters=_parameters_from_azure(data.get("parameters")),
        )


class RoleAssignmentArtifactProperties(ArtifactProperties):
    """Role assignment artifact."""

    role_definition_id: Annotated[str, Field(min_length=1)]
    principal_ids: list[str] = Field(default_factory=list)

    @field_validator("principal_ids")
    @classmethod
    def validate_principal_ids(cls, v: list[str]) -> list[str]:
        return _require_non_empty(v, "principal_ids")

    def to_azure_payload(self) -> dict[str, Any]:
        body = self._common_payload()
        body["roleDefinitionId"] = self.role_definition_id
        body["principalIds"] = list(self.principal_ids)
        return body

    @classmethod
    def from_azure(cls, data: dict[str, Any]) -> RoleAssignmentArtifactProperties:
        principal_ids = data.get("principalIds") or []
        if isinstance(principal_ids, str):
            principal_ids = [principal_ids]
        return cls(
            **cls._common_fields(data),
            role_definition_id=data.get("roleDefinitionId") or "",
            principal_ids=principal_ids,
        )


AnyArtifactProperties = (
    TemplateArtifactProperties | PolicyAssignmentArtifactProperties | RoleAssignmentArtifactProperties
)

PROPERTIES_BY_KIND: dict[ArtifactKind, type[ArtifactProperties]] = {
    ArtifactKind.TEMPLATE: TemplateArtifactProperties,
    ArtifactKind.POLICY_ASSIGNMENT: PolicyAssignmentArtifactProperties,
    ArtifactKind.ROLE_ASSIGNMENT: RoleAssignmentArtifactProperties,
}


class BaseArtifactSpec(BaseModel):
    """Fields shared by the artifact resources.

    ``scope`` may be omitted in a manifest, in which case it is inherited
    from the blueprint of the same name.
    """

    model_config = {"extra": "forbid"}

    name: Annotated[str, Field(min_length=1, max_length=MAX_ARTIFACT_NAME_LENGTH)]
    scope: str | None = None
    blueprint_name: Annotated[str, Field(min_length=1)]

    @field_validator("scope")
    @classmethod
    def validate_scope(cls, v: str | None) -> str | None:
        return check_scope(v) if v is not None else v

    @property
    @abstractmethod
    def kind(self) -> ArtifactKind: ...

    @property
    @abstractmethod
    def artifact_properties(self) -> ArtifactProperties: ...

    @property
    def resolved_scope(self) -> str:
        """Scope after manifest inheritance.

        Raises:
            ValueError: If the scope was neither given nor inherited.
        """
        if self.scope is None:
            raise ValueError(f"Artifact {self.name!r} has no scope")
        return self.scope

    @property
    def address(self) -> str:
        return artifact_address(self.scope, self.blueprint_name, self.name)

    def to_azure_payload(self) -> dict[str, Any]:
        """Expand into an artifact create-or-update request body."""
        return {"kind": self.kind.value, "properties": self.artifact_properties.to_azure_payload()}


class ArtifactSpec(BaseArtifactSpec):
    """Generic artifact: one properties block, selected by ``kind``."""

    model_config = {"extra": "forbid", "populate_by_name": True}

    artifact_kind: ArtifactKind = Field(alias="kind")
    template_artifact: TemplateArtifactProperties | None = None
    policy_assignment_artifact: PolicyAssignmentArtifactProperties | None = None
    role_assignment_artifact: RoleAssignmentArtifactProperties | None = None

    @field_validator("artifact_kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: Any) -> Any:
        if isinstance(v, str):
            for kind in ArtifactKind:
                if kind.value.lower() == v.lower():
                    return kind
        return v

    @model_validator(mode="after")
    def validate_single_block(self) -> ArtifactSpec:
        blocks = {
            ArtifactKind.TEMPLATE: self.template_artifact,
            ArtifactKind.POLICY_ASSIGNMENT: self.policy_assignment_artifact,
            ArtifactKind.ROLE_ASSIGNMENT: self.role_assignment_artifact,
        }
        given = [kind for kind, block in blocks.items() if block is not None]
        if len(given) != 1:
            raise ValueError(
                "exactly one of template_artifact, policy_assignment_artifact "
                "or role_assignment_artifact must be set"
            )
        if given[0] != self.artifact_kind:
            raise ValueError(
                f"kind {self.artifact_kind.value!r} does not match the "
                f"{given[0].value!r} properties block"
            )
        return self

    @property
    def kind(self) -> ArtifactKind:
        return self.artifact_kind

    @property
    def artifact_properties(self) -> ArtifactProperties:
        block = (
            self.template_artifact
            or self.policy_assignment_artifact
            or self.role_assignment_artifact
        )
        if block is None:
            raise ValueError(f"Artifact {self.name!r} has no properties block")
        return block


class PolicyAssignmentArtifactSpec(BaseArtifactSpec):
    """Dedicated policy assignment artifact resource."""

    properties: PolicyAssignmentArtifactProperties

    @property
    def kind(self) -> ArtifactKind:
        return ArtifactKind.POLICY_ASSIGNMENT

    @property
    def artifact_properties(self) -> ArtifactProperties:
        return self.properties


class ArtifactState(BaseModel):
    """Artifact as read back from the API."""

    id: str | None = None
    name: str
    scope: str
    blueprint_name: str
    kind: ArtifactKind
    properties: AnyArtifactProperties

    @classmethod
    def from_azure(cls, scope: str, blueprint_name: str, data: dict[str, Any]) -> ArtifactState:
        """Flatten an artifact API response by kind.

        Raises:
            ValueError: If the artifact kind is not supported.
        """
        kind = ArtifactKind(data.get("kind"))
        properties_class = PROPERTIES_BY_KIND[kind]
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            scope=scope,
            blueprint_name=blueprint_name,
            kind=kind,
            properties=properties_class.from_azure(data.get("properties") or {}),
        )

    def to_azure_payload(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "properties": self.properties.to_azure_payload()}


# =============================================================================
# Manifest
# =============================================================================


class BlueprintManifest(BaseModel):
    """Desired state of every blueprint resource in one manifest file."""

    model_config = {"extra": "forbid"}

    blueprints: list[BlueprintSpec] = Field(default_factory=list)
    artifacts: list[ArtifactSpec] = Field(default_factory=list)
    policy_assignment_artifacts: list[PolicyAssignmentArtifactSpec] = Field(default_factory=list)

    @property
    def all_artifacts(self) -> list[BaseArtifactSpec]:
        return [*self.artifacts, *self.policy_assignment_artifacts]

    @model_validator(mode="after")
    def resolve_artifact_scopes(self) -> BlueprintManifest:
        blueprint_ids: set[tuple[str, str]] = set()
        scopes_by_name: dict[str, set[str]] = {}
        for blueprint in self.blueprints:
            identity = (blueprint.scope, blueprint.name)
            if identity in blueprint_ids:
                raise ValueError(f"duplicate blueprint {blueprint.name!r} in scope {blueprint.scope!r}")
            blueprint_ids.add(identity)
            scopes_by_name.setdefault(blueprint.name, set()).add(blueprint.scope)

        artifact_ids: set[tuple[str, str, str]] = set()
        for artifact in self.all_artifacts:
            if artifact.scope is None:
                scopes = scopes_by_name.get(artifact.blueprint_name, set())
                if len(scopes) != 1:
                    raise ValueError(
                        f"artifact {artifact.name!r} has no scope and blueprint "
                        f"{artifact.blueprint_name!r} does not resolve to a single scope"
                    )
                artifact.scope = next(iter(scopes))

            artifact_identity = (artifact.scope, artifact.blueprint_name, artifact.name)
            if artifact_identity in artifact_ids:
                raise ValueError(
                    f"duplicate artifact {artifact.name!r} in blueprint {artifact.blueprint_name!r}"
                )
            artifact_ids.add(artifact_identity)

        return self
