"""Manifest file loading with validation.

SECURITY: File size is checked before reading. Input validation is performed
at the boundary and reported as one readable line per failure.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import MAX_MANIFEST_FILE_SIZE_BYTES
from .models import BlueprintManifest

logger = logging.getLogger(__name__)


class SpecLoadError(Exception):
    """Raised when manifest loading or validation fails."""

    pass


def format_validation_error(error: ValidationError) -> str:
    """Render a pydantic error as ``  - location: message`` lines."""
    lines = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item["loc"]) or "manifest"
        lines.append(f"  - {loc}: {item['msg']}")
    return "\n".join(lines)


def parse_manifest(raw_data: object, source: str = "<manifest>") -> BlueprintManifest:
    """Validate already-parsed manifest data.

    Supports both a flat document and a Kubernetes-style wrapper with
    ``apiVersion``/``kind``/``spec``.

    Raises:
        SpecLoadError: If the data is not a mapping or fails validation.
    """
    if not isinstance(raw_data, dict):
        raise SpecLoadError(f"Manifest must contain a YAML mapping: {source}")

    if "apiVersion" in raw_data and "spec" in raw_data:
        spec_data = raw_data.get("spec") or {}
        if not isinstance(spec_data, dict):
            raise SpecLoadError(f"Spec section must be a mapping: {source}")
    else:
        spec_data = raw_data

    try:
        return BlueprintManifest.model_validate(spec_data)
    except ValidationError as e:
        raise SpecLoadError(
            f"Validation failed for {source}:\n{format_validation_error(e)}"
        ) from e


def load_manifest(path: Path) -> BlueprintManifest:
    """Load and validate a blueprint manifest from YAML.

    Args:
        path: Path to the manifest file.

    Returns:
        Validated manifest.

    Raises:
        SpecLoadError: If the file cannot be read, parsed or validated.
    """
    if not path.exists():
        raise SpecLoadError(f"Manifest file not found: {path}")

    try:
        file_size = path.stat().st_size
    except OSError as e:
        raise SpecLoadError(f"Failed to stat manifest file {path}: {e}") from e

    if file_size > MAX_MANIFEST_FILE_SIZE_BYTES:
        raise SpecLoadError(
            f"Manifest file exceeds maximum size of {MAX_MANIFEST_FILE_SIZE_BYTES} bytes: {path}"
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SpecLoadError(f"Failed to read manifest file {path}: {e}") from e

    try:
        raw_data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SpecLoadError(f"Invalid YAML in {path}: {e}") from e

    manifest = parse_manifest(raw_data, str(path))

    logger.info(
        "Loaded manifest from %s",
        path,
        extra={
            "blueprints": len(manifest.blueprints),
            "artifacts": len(manifest.all_artifacts),
        },
    )
    return manifest
