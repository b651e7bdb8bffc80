"""Group, flatten, and inspect the parameters of a client method.

A client method such as ``CreateSite(SiteRequest request, bool dryRun)`` is
turned into a flat call surface ``(Name, Status, dryRun)`` in three steps:

1. :func:`group_parameters` -- one :class:`~sdkwrap.models.ParameterGroup`
   per declared parameter, in declaration order. Complex groups carry the
   writable public properties of their type (one level deep).
2. :func:`flatten_parameters` -- expand groups into
   :class:`~sdkwrap.models.FlattenedParameter` entries that remember which
   group and property they came from, so the original call can be rebuilt.
3. :func:`discover_nested_types` -- collect the complex property types that
   need their own constructor function. The run-scoped
   :class:`EmittedTypeRegistry` makes sure each one is emitted only once.

Read-only properties are excluded at step 1: generated code could never
assign them, so they appear neither as parameters nor in reconstruction.

Flattened names are not group-qualified. When two sibling complex
parameters expose the same property name, both entries keep that name;
:func:`find_name_collisions` reports such cases but does not rename them.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from sdkwrap.exceptions import IntrospectionError
from sdkwrap.generator.classifier import is_complex
from sdkwrap.models import (
    FlattenedParameter,
    ParameterGroup,
    ParameterInfo,
    PropertyInfo,
    SdkMetadata,
    TypeRef,
)


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def writable_properties(type_ref: TypeRef, metadata: SdkMetadata) -> list[PropertyInfo]:
    """Return the writable public properties of *type_ref* in declaration order.

    Raises:
        IntrospectionError: If *type_ref* has no definition in *metadata*.
    """
    definition = metadata.find_type(type_ref)
    if definition is None:
        raise IntrospectionError(
            f"No type definition for complex type '{type_ref.display_name()}'"
        )
    return [p for p in definition.properties if p.can_write]


def group_parameters(
    parameters: Sequence[ParameterInfo],
    metadata: SdkMetadata,
) -> list[ParameterGroup]:
    """Build one :class:`~sdkwrap.models.ParameterGroup` per parameter.

    ``position`` is the index in *parameters*, which must already be in
    declared order.

    Raises:
        IntrospectionError: If a complex parameter type cannot be
            introspected.
    """
    groups: list[ParameterGroup] = []
    for position, param in enumerate(parameters):
        if is_complex(param.type):
            groups.append(ParameterGroup(
                name=param.name,
                type=param.type,
                is_complex=True,
                properties=writable_properties(param.type, metadata),
                position=position,
            ))
        else:
            groups.append(ParameterGroup(
                name=param.name,
                type=param.type,
                is_complex=False,
                position=position,
            ))
    return groups


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------


def flatten_parameters(groups: Iterable[ParameterGroup]) -> list[FlattenedParameter]:
    """Expand parameter groups into an ordered call surface.

    Simple groups yield exactly one entry with no source property. Complex
    groups yield one entry per property, whether that property is simple
    or complex; complex properties keep their object type and are not
    expanded further.

    The result is ordered by group position, then property order. Callers
    rebuild the original call by grouping on ``source_group_position``.
    """
    flat: list[FlattenedParameter] = []
    for group in sorted(groups, key=lambda g: g.position):
        if not group.is_complex:
            flat.append(FlattenedParameter(
                name=group.name,
                type=group.type,
                is_complex=False,
                source_group_name=group.name,
                source_group_position=group.position,
                source_group_type=group.type,
            ))
            continue

        for prop in group.properties:
            flat.append(FlattenedParameter(
                name=prop.name,
                type=prop.type,
                is_complex=is_complex(prop.type),
                source_group_name=group.name,
                source_group_position=group.position,
                source_group_type=group.type,
                source_property_name=prop.name,
            ))
    return flat


def find_name_collisions(flat: Iterable[FlattenedParameter]) -> list[str]:
    """Return call-surface names that occur more than once, sorted."""
    counts = Counter(fp.name for fp in flat)
    return sorted(name for name, count in counts.items() if count > 1)


# ---------------------------------------------------------------------------
# Nested types
# ---------------------------------------------------------------------------


def discover_nested_types(groups: Iterable[ParameterGroup]) -> list[TypeRef]:
    """Collect distinct complex property types of complex groups.

    Types are deduplicated by :attr:`~sdkwrap.models.TypeRef.key` and
    returned in first-seen order, nullable wrappers unwrapped.
    """
    seen: set[str] = set()
    nested: list[TypeRef] = []
    for group in groups:
        if not group.is_complex:
            continue
        for prop in group.properties:
            if not is_complex(prop.type):
                continue
            type_ref = prop.type.unwrap_nullable()
            if type_ref.key in seen:
                continue
            seen.add(type_ref.key)
            nested.append(type_ref)
    return nested


class EmittedTypeRegistry:
    """Run-scoped set of types that already have a constructor function.

    Created empty by the emission driver at the start of a run and shared
    by every endpoint processed in it. It only grows.

    Not safe for concurrent use; the driver processes endpoints one at a
    time.
    """

    def __init__(self) -> None:
        self._keys: set[str] = set()

    def add(self, type_ref: TypeRef) -> bool:
        """Register *type_ref*. Returns ``False`` if it was already present."""
        key = type_ref.unwrap_nullable().key
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def __contains__(self, type_ref: object) -> bool:
        if not isinstance(type_ref, TypeRef):
            return False
        return type_ref.unwrap_nullable().key in self._keys

    def __len__(self) -> int:
        return len(self._keys)
