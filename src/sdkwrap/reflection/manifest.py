"""Extract :class:`~sdkwrap.models.SdkMetadata` from a raw metadata manifest.

A manifest is the reflection dump of a client library: the types it
defines and the API classes whose methods become endpoints. It is usually
produced by a small reflection tool run against the compiled client
(a .NET assembly, for instance) and checked in next to the generated
wrappers::

    manifest_version: 1
    sdk: {name: NetBoxSdk, version: "4.1"}
    types:
      - type: NetBox.Models.SiteRequest
        properties:
          - {name: Name, type: System.String, attributes: [RequiredAttribute]}
          - {name: Status, type: "NetBox.Models.StatusEnum?"}
      - {type: NetBox.Models.StatusEnum, kind: enum}
    api_classes:
      - type: NetBox.Api.DcimApi
        methods:
          - name: CreateSite
            return_type: System.Threading.Tasks.Task<NetBox.Models.SiteResult>
            parameters:
              - {name: request, type: NetBox.Models.SiteRequest}

Type references are either mappings (``name``, ``full_name``, ``kind``,
``generic_args``, ``nullable``) or shorthand strings. Shorthand supports
generic arguments in angle brackets and a trailing ``?`` for nullable
value types; ``System.Nullable<T>`` is accepted as well. Inside YAML flow
mappings (``{name: x, type: ...}``) a trailing ``?`` must be quoted, since
YAML reads an unquoted ``?`` there as a mapping-key indicator. The kind of a
shorthand reference is taken from the manifest's own ``types`` table, then
from the built-in CLR table, and defaults to ``class``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import ValidationError

from sdkwrap.exceptions import ManifestError
from sdkwrap.models import SdkMetadata, TypeKind, TypeRef

CLR_KINDS: dict[str, TypeKind] = {
    "System.Void": TypeKind.VOID,
    "System.String": TypeKind.CLASS,
    "System.Object": TypeKind.CLASS,
    "System.Uri": TypeKind.CLASS,
    "System.Boolean": TypeKind.STRUCT,
    "System.Char": TypeKind.STRUCT,
    "System.Byte": TypeKind.STRUCT,
    "System.SByte": TypeKind.STRUCT,
    "System.Int16": TypeKind.STRUCT,
    "System.UInt16": TypeKind.STRUCT,
    "System.Int32": TypeKind.STRUCT,
    "System.UInt32": TypeKind.STRUCT,
    "System.Int64": TypeKind.STRUCT,
    "System.UInt64": TypeKind.STRUCT,
    "System.Single": TypeKind.STRUCT,
    "System.Double": TypeKind.STRUCT,
    "System.Decimal": TypeKind.STRUCT,
    "System.DateTime": TypeKind.STRUCT,
    "System.DateTimeOffset": TypeKind.STRUCT,
    "System.DateOnly": TypeKind.STRUCT,
    "System.TimeOnly": TypeKind.STRUCT,
    "System.Guid": TypeKind.STRUCT,
    "System.TimeSpan": TypeKind.STRUCT,
    "System.Threading.CancellationToken": TypeKind.STRUCT,
}
"""Kinds of well-known framework types that manifests rarely declare."""

_NULLABLE_NAMES = ("System.Nullable", "Nullable")

_TOKEN_RE = re.compile(r"\s*([<>,?]|[^<>,?\s]+)")


# ---------------------------------------------------------------------------
# Shorthand type-name parsing
# ---------------------------------------------------------------------------


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ManifestError(f"Invalid type reference: {text!r}")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


class _TypeResolver:
    """Turn manifest type references into :class:`~sdkwrap.models.TypeRef` objects."""

    def __init__(self, declared_kinds: dict[str, TypeKind]) -> None:
        self._declared_kinds = declared_kinds

    def kind_for(self, full_name: Optional[str]) -> TypeKind:
        if full_name is None:
            return TypeKind.CLASS
        if full_name in self._declared_kinds:
            return self._declared_kinds[full_name]
        return CLR_KINDS.get(full_name, TypeKind.CLASS)

    def resolve(self, raw: Any) -> TypeRef:
        if isinstance(raw, str):
            return self._from_text(raw)
        if isinstance(raw, dict):
            return self._from_mapping(raw)
        raise ManifestError(f"Invalid type reference: {raw!r}")

    def _from_mapping(self, raw: dict[str, Any]) -> TypeRef:
        full_name = raw.get("full_name")
        name = raw.get("name") or (_short_name(full_name) if full_name else None)
        if not name:
            raise ManifestError(f"Type reference needs a name or full_name: {raw!r}")
        if "kind" in raw:
            try:
                kind = TypeKind(raw["kind"])
            except ValueError as exc:
                raise ManifestError(f"Unknown type kind {raw['kind']!r} for '{name}'") from exc
        else:
            kind = self.kind_for(full_name)
        generic_args = tuple(self.resolve(arg) for arg in raw.get("generic_args", []))
        return TypeRef(
            name=name,
            full_name=full_name,
            kind=kind,
            generic_args=generic_args,
            nullable=bool(raw.get("nullable", False)),
        )

    def _from_text(self, text: str) -> TypeRef:
        tokens = _tokenize(text)
        if not tokens:
            raise ManifestError("Empty type reference")
        type_ref, index = self._parse(tokens, 0, text)
        if index != len(tokens):
            raise ManifestError(f"Unexpected {tokens[index]!r} in type reference {text!r}")
        return type_ref

    def _parse(self, tokens: list[str], index: int, text: str) -> tuple[TypeRef, int]:
        if index >= len(tokens) or tokens[index] in "<>,?":
            raise ManifestError(f"Expected a type name in {text!r}")
        qualified = tokens[index]
        index += 1

        args: list[TypeRef] = []
        if index < len(tokens) and tokens[index] == "<":
            index += 1
            while True:
                arg, index = self._parse(tokens, index, text)
                args.append(arg)
                if index >= len(tokens):
                    raise ManifestError(f"Unclosed '<' in type reference {text!r}")
                if tokens[index] == ",":
                    index += 1
                    continue
                if tokens[index] == ">":
                    index += 1
                    break
                raise ManifestError(f"Unexpected {tokens[index]!r} in type reference {text!r}")

        nullable = False
        if index < len(tokens) and tokens[index] == "?":
            nullable = True
            index += 1

        if qualified in _NULLABLE_NAMES and len(args) == 1:
            return args[0].model_copy(update={"nullable": True}), index

        return TypeRef(
            name=_short_name(qualified),
            full_name=qualified,
            kind=self.kind_for(qualified),
            generic_args=tuple(args),
            nullable=nullable,
        ), index


def _short_name(qualified: str) -> str:
    return qualified.rsplit(".", 1)[-1]


def parse_type_reference(raw: Any, declared_kinds: Optional[dict[str, TypeKind]] = None) -> TypeRef:
    """Resolve a single manifest type reference (string or mapping).

    Example::

        >>> parse_type_reference("System.Int32?").nullable
        True
        >>> parse_type_reference("Task<Foo.Bar>").generic_args[0].name
        'Bar'
    """
    return _TypeResolver(declared_kinds or {}).resolve(raw)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _declared_kinds(raw_types: list[Any]) -> dict[str, TypeKind]:
    """First pass: collect the kinds declared in the ``types`` table."""
    kinds: dict[str, TypeKind] = {}
    for entry in raw_types:
        if not isinstance(entry, dict):
            continue
        ref = entry.get("type")
        kind = entry.get("kind")
        if isinstance(ref, dict):
            kind = ref.get("kind", kind)
            ref = ref.get("full_name")
        if isinstance(ref, str) and kind is not None:
            try:
                kinds[ref] = TypeKind(kind)
            except ValueError as exc:
                raise ManifestError(f"Unknown type kind {kind!r} for '{ref}'") from exc
    return kinds


def _require_list(value: Any, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"'{where}' must be a list")
    return value


def _extract_type(entry: dict[str, Any], resolver: _TypeResolver) -> dict[str, Any]:
    if "type" not in entry:
        raise ManifestError(f"Type entry without 'type': {entry!r}")
    type_ref = resolver.resolve(entry["type"])
    if "kind" in entry and isinstance(entry["type"], str):
        type_ref = type_ref.model_copy(update={"kind": TypeKind(entry["kind"])})
    properties = []
    for prop in _require_list(entry.get("properties"), f"{type_ref.name}.properties"):
        properties.append({
            "name": prop.get("name"),
            "type": resolver.resolve(prop.get("type")),
            "can_write": prop.get("can_write", True),
            "attributes": prop.get("attributes", []),
        })
    return {
        "type": type_ref,
        "properties": properties,
        "has_default_constructor": entry.get("has_default_constructor", True),
        "factory_method": entry.get("factory_method"),
    }


def _extract_method(entry: dict[str, Any], resolver: _TypeResolver) -> dict[str, Any]:
    parameters = []
    for index, param in enumerate(_require_list(entry.get("parameters"), "parameters")):
        parameters.append({
            "name": param.get("name"),
            "type": resolver.resolve(param.get("type")),
            "position": param.get("position", index),
        })
    return_type = entry.get("return_type")
    return {
        "name": entry.get("name"),
        "return_type": resolver.resolve(return_type) if return_type is not None else None,
        "parameters": parameters,
        "is_public": entry.get("is_public", True),
        "is_static": entry.get("is_static", False),
        "is_special_name": entry.get("is_special_name", False),
        "declared": entry.get("declared", True),
    }


def extract_metadata(raw: dict[str, Any]) -> SdkMetadata:
    """Build :class:`~sdkwrap.models.SdkMetadata` from a loaded manifest dict.

    Args:
        raw: The manifest as returned by
            :func:`~sdkwrap.reflection.loader.load_source`.

    Returns:
        The validated metadata.

    Raises:
        ManifestError: If the manifest structure or any type reference is
            invalid.
    """
    raw_types = _require_list(raw.get("types"), "types")
    raw_classes = _require_list(raw.get("api_classes"), "api_classes")
    resolver = _TypeResolver(_declared_kinds(raw_types))

    sdk_info = raw.get("sdk") or {}
    try:
        types = [_extract_type(entry, resolver) for entry in raw_types]
        api_classes = []
        for entry in raw_classes:
            if "type" not in entry:
                raise ManifestError(f"API class entry without 'type': {entry!r}")
            api_classes.append({
                "type": resolver.resolve(entry["type"]),
                "is_abstract": entry.get("is_abstract", False),
                "methods": [
                    _extract_method(m, resolver)
                    for m in _require_list(entry.get("methods"), "methods")
                ],
            })
        return SdkMetadata.model_validate({
            "name": sdk_info.get("name", "sdk"),
            "version": sdk_info.get("version"),
            "types": types,
            "api_classes": api_classes,
        })
    except (ValidationError, AttributeError) as exc:
        raise ManifestError(f"Invalid manifest: {exc}") from exc
