"""Load metadata manifests from a URL, local file, or stdin.

This module handles all I/O for fetching raw metadata manifests and
converting them into Python dictionaries. It supports both JSON and YAML
formats with automatic format detection, and validates that the document
declares a supported manifest version.

The two public functions are:

* :func:`load_source` -- Load and parse a manifest from any supported source.
* :func:`validate_manifest_version` -- Check and return the
  ``manifest_version`` string.

After loading, the raw dict should be passed to
:func:`~sdkwrap.reflection.manifest.extract_metadata`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from sdkwrap.exceptions import ManifestError

SUPPORTED_MAJOR_VERSION = "1"


def load_source(source: str) -> dict[str, Any]:
    """Load a manifest from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed manifest as a dictionary.

    Raises:
        ManifestError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    """Read a manifest from stdin."""
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise ManifestError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise ManifestError("No input received from stdin")

    return _parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a manifest from *url*. Supports JSON and YAML responses.

    Raises:
        ManifestError: If the URL cannot be fetched or content cannot be parsed.
    """
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ManifestError(
            f"HTTP {exc.response.status_code} fetching manifest from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise ManifestError(f"Failed to fetch manifest from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a manifest from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ManifestError(f"Manifest file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Failed to read manifest file {path}: {exc}") from exc

    if not content.strip():
        raise ManifestError(f"Manifest file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.

    Raises:
        ManifestError: If the content cannot be parsed as either format.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise ManifestError(f"Invalid JSON: {exc}") from exc
        else:
            if not isinstance(result, dict):
                raise ManifestError(
                    f"Manifest must be a JSON/YAML object (got {type(result).__name__})"
                )
            return result

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        if not isinstance(result, dict):
            raise ManifestError(
                "Manifest must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result

    msg = "Failed to parse manifest as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise ManifestError(msg)


def validate_manifest_version(manifest: dict[str, Any]) -> str:
    """Validate and return the ``manifest_version`` string.

    Version ``1`` and any ``1.x`` are accepted.

    Raises:
        ManifestError: If the version is missing or unsupported.
    """
    version = manifest.get("manifest_version")
    if version is None:
        raise ManifestError(
            "Missing 'manifest_version' field. Is this an sdkwrap metadata manifest?"
        )

    version_str = str(version)
    if version_str == SUPPORTED_MAJOR_VERSION or version_str.startswith(
        f"{SUPPORTED_MAJOR_VERSION}."
    ):
        return version_str

    raise ManifestError(
        f"Unsupported manifest version: {version_str}. "
        f"Only version {SUPPORTED_MAJOR_VERSION}.x is supported."
    )
