"""Type reflection -- turn a client library description into :class:`~sdkwrap.models.SdkMetadata`.

Two sources are supported:

* a metadata **manifest** (JSON or YAML, local file, URL, or stdin)
  dumped from a compiled client such as a .NET assembly;
* an importable **Python module** whose client classes are inspected in
  process.

Typical usage::

    from sdkwrap.reflection import load_metadata, discover_endpoints

    metadata = load_metadata("netbox-sdk.yaml")
    endpoints = discover_endpoints(metadata, class_pattern="*.Api.*")

Sub-modules:

* :mod:`~sdkwrap.reflection.loader` -- I/O layer plus manifest version check.
* :mod:`~sdkwrap.reflection.manifest` -- manifest dict to metadata.
* :mod:`~sdkwrap.reflection.python_module` -- live module reflection.
* :mod:`~sdkwrap.reflection.discovery` -- select endpoint methods.
"""

from __future__ import annotations

import importlib

from sdkwrap.exceptions import ManifestError
from sdkwrap.models import SdkMetadata
from sdkwrap.reflection.discovery import discover_endpoints, is_endpoint_method
from sdkwrap.reflection.loader import load_source, validate_manifest_version
from sdkwrap.reflection.manifest import extract_metadata
from sdkwrap.reflection.python_module import reflect_module


def load_metadata(source: str, module: bool = False) -> SdkMetadata:
    """Load metadata from a manifest *source* or, with *module*, a module name.

    Raises:
        ManifestError: If the manifest cannot be loaded or the module
            cannot be imported.
    """
    if module:
        try:
            imported = importlib.import_module(source)
        except ImportError as exc:
            raise ManifestError(f"Cannot import module '{source}': {exc}") from exc
        return reflect_module(imported)

    raw = load_source(source)
    validate_manifest_version(raw)
    return extract_metadata(raw)


__all__ = [
    "discover_endpoints",
    "extract_metadata",
    "is_endpoint_method",
    "load_metadata",
    "load_source",
    "reflect_module",
    "validate_manifest_version",
]
