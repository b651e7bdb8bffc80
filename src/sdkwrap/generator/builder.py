"""Build serializer-agnostic function descriptors for wrappers and constructors.

Two kinds of function are described:

* **Wrappers** (``<Verb><Noun>``) -- one per endpoint. The first parameter
  is the bound client handle; the rest is the flattened call surface. The
  body rebuilds every complex argument from its flattened values, guarded
  by "was this parameter explicitly supplied", then calls the client
  method with the arguments in their original positional order.
* **Constructors** (``New<Noun>``) -- one per distinct nested complex type,
  so callers can build the objects that wrapper parameters expect.

Instances are created through the type's parameterless constructor when it
has one, otherwise through its static factory method. A type with neither
raises :class:`~sdkwrap.exceptions.ConstructionPathError` at generation
time instead of producing code that fails when it runs.

Whether a constructor parameter is required is decided by a pluggable
``is_required(property) -> bool`` predicate. The default one looks for
``Required`` or ``Mandatory`` anywhere in an attribute name, so it also
matches names like ``NotRequiredAttribute``. Tests pin this behaviour.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Iterable, Optional, Sequence

from sdkwrap.exceptions import (
    ConstructionPathError,
    IntrospectionError,
    UnresolvableTypeError,
)
from sdkwrap.generator.classifier import is_complex
from sdkwrap.generator.naming import unwrap_generic
from sdkwrap.models import (
    ConditionalAssign,
    ConstructInstance,
    EmitValue,
    EndpointDescriptor,
    FlattenedParameter,
    FunctionDescriptor,
    FunctionKind,
    InvokeMethod,
    ParameterSpec,
    PropertyInfo,
    SdkMetadata,
    Statement,
    TypeRef,
    Verb,
)

RequiredPredicate = Callable[[PropertyInfo], bool]

DEFAULT_REQUIRED_MARKERS: tuple[str, ...] = ("Required", "Mandatory")


def make_marker_predicate(markers: Iterable[str]) -> RequiredPredicate:
    """Build an ``is_required`` predicate matching attribute-name substrings.

    Matching is case-sensitive substring search over
    :attr:`~sdkwrap.models.PropertyInfo.attributes`.
    """
    marker_list = tuple(markers)

    def _is_required(prop: PropertyInfo) -> bool:
        return any(
            marker in attribute
            for attribute in prop.attributes
            for marker in marker_list
        )

    return _is_required


default_is_required: RequiredPredicate = make_marker_predicate(DEFAULT_REQUIRED_MARKERS)


def qualified_type_name(type_ref: TypeRef) -> str:
    """Return the fully qualified name of *type_ref*, nullable unwrapped.

    Generic arguments are appended in bracket form, e.g.
    ``System.Collections.Generic.List[System.String]``.

    Raises:
        UnresolvableTypeError: If the type (or a generic argument) has no
            fully qualified name.
    """
    underlying = type_ref.unwrap_nullable()
    if not underlying.full_name:
        raise UnresolvableTypeError(
            f"Type '{underlying.display_name()}' has no fully qualified name"
        )
    if underlying.generic_args:
        args = ",".join(qualified_type_name(arg) for arg in underlying.generic_args)
        return f"{underlying.full_name}[{args}]"
    return underlying.full_name


def _is_non_nullable_value_type(type_ref: TypeRef) -> bool:
    return type_ref.is_value_type and not type_ref.nullable


def _names_in_use(names: Iterable[str]) -> set[str]:
    """Lower-cased parameter names, also without surrounding underscores."""
    taken: set[str] = set()
    for name in names:
        taken.add(name.lower())
        taken.add(name.lower().strip("_"))
    return taken


def _local_name(base: str, taken: set[str]) -> str:
    """Return *base*, underscore-prefixed until it differs from every name in *taken*.

    Comparison is case-insensitive (PowerShell variables are), and the
    chosen name is added to *taken*.
    """
    name = base
    while name.lower() in taken:
        name = f"_{name}"
    taken.add(name.lower())
    return name


class FunctionBuilder:
    """Assemble :class:`~sdkwrap.models.FunctionDescriptor` objects.

    Args:
        metadata: The SDK metadata, used to look up construction paths and
            property sets.
        is_required: Predicate deciding whether a constructor parameter is
            mandatory beyond the non-nullable value type rule.
        handle_name: Name of the bound client parameter on wrappers.
    """

    def __init__(
        self,
        metadata: SdkMetadata,
        is_required: RequiredPredicate = default_is_required,
        handle_name: str = "Sdk",
    ) -> None:
        self._metadata = metadata
        self._is_required = is_required
        self._handle_name = handle_name

    # ------------------------------------------------------------------
    # Construction path
    # ------------------------------------------------------------------

    def construction_for(self, type_ref: TypeRef, variable: str) -> ConstructInstance:
        """Return the statement creating a default instance of *type_ref*.

        Raises:
            UnresolvableTypeError: If the type has no qualified name.
            IntrospectionError: If the type has no definition.
            ConstructionPathError: If the type has neither a parameterless
                constructor nor a factory method.
        """
        type_name = qualified_type_name(type_ref)
        definition = self._metadata.find_type(type_ref)
        if definition is None:
            raise IntrospectionError(f"No type definition for '{type_name}'")
        if definition.has_default_constructor:
            return ConstructInstance(variable=variable, type_name=type_name)
        if definition.factory_method:
            return ConstructInstance(
                variable=variable,
                type_name=type_name,
                factory_method=definition.factory_method,
            )
        raise ConstructionPathError(
            f"Type '{type_name}' has no parameterless constructor and no factory method"
        )

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    def build_constructor(self, noun: str, type_ref: TypeRef) -> FunctionDescriptor:
        """Describe a ``New<Noun>`` function that builds an instance of *type_ref*.

        Every writable property becomes a parameter (position in declaration
        order) and a guarded assignment; read-only properties are skipped.
        """
        definition = self._metadata.find_type(type_ref)
        settable = [p for p in definition.properties if p.can_write] if definition else []
        variable = _local_name("obj", _names_in_use(p.name for p in settable))
        construct = self.construction_for(type_ref, variable)

        parameters: list[ParameterSpec] = []
        body: list[Statement] = [construct]
        for position, prop in enumerate(settable):
            required = _is_non_nullable_value_type(prop.type) or self._is_required(prop)
            parameters.append(ParameterSpec(
                name=prop.name,
                type_name=qualified_type_name(prop.type),
                required=required,
                position=position,
            ))
            body.append(ConditionalAssign(variable=variable, member=prop.name, parameter=prop.name))
        body.append(EmitValue(variable=variable))

        return FunctionDescriptor(
            name=f"{Verb.NEW.value}{noun}",
            verb=Verb.NEW.value,
            noun=noun,
            kind=FunctionKind.CONSTRUCTOR,
            parameters=parameters,
            body=body,
            output_type=construct.type_name,
            source=construct.type_name,
        )

    # ------------------------------------------------------------------
    # Wrappers
    # ------------------------------------------------------------------

    def build_wrapper(
        self,
        verb: Verb,
        noun: str,
        flattened: Sequence[FlattenedParameter],
        endpoint: EndpointDescriptor,
    ) -> FunctionDescriptor:
        """Describe a ``<Verb><Noun>`` wrapper around *endpoint*.

        Flattened parameters are grouped back by ``source_group_position``.
        A group with no property-sourced members passes its single variable
        straight through. Otherwise an ``obj<position>`` instance of the
        group type is constructed (underscore-prefixed while a parameter
        already uses that name), each supplied member is written to the
        property it came from, and the instance is passed. A complex
        parameter whose type exposes no writable properties has no
        flattened entries; it is passed as a default instance.
        """
        parameters = [
            ParameterSpec(name=self._handle_name, required=True, position=0)
        ]
        for index, fp in enumerate(flattened, start=1):
            parameters.append(ParameterSpec(
                name=fp.name,
                type_name=qualified_type_name(fp.type),
                required=fp.is_complex or _is_non_nullable_value_type(fp.type),
                position=index,
            ))

        by_position: dict[int, list[FlattenedParameter]] = defaultdict(list)
        for fp in flattened:
            by_position[fp.source_group_position].append(fp)

        taken = _names_in_use(p.name for p in parameters)
        body: list[Statement] = []
        arguments: list[str] = []
        for position, original in enumerate(endpoint.parameters):
            members = by_position.get(position, [])
            if members and not any(m.is_property_sourced for m in members):
                arguments.append(members[0].name)
                continue
            if not members and not is_complex(original.type):
                arguments.append(original.name)
                continue

            variable = _local_name(f"obj{position}", taken)
            group_type = members[0].source_group_type if members else original.type
            body.append(self.construction_for(group_type, variable))
            for member in members:
                body.append(ConditionalAssign(
                    variable=variable,
                    member=member.source_property_name or member.name,
                    parameter=member.name,
                ))
            arguments.append(variable)

        body.append(InvokeMethod(
            receiver=self._handle_name,
            method=endpoint.method_name,
            arguments=arguments,
        ))

        return FunctionDescriptor(
            name=f"{verb.value}{noun}",
            verb=verb.value,
            noun=noun,
            kind=FunctionKind.WRAPPER,
            parameters=parameters,
            body=body,
            output_type=self._output_type(endpoint.return_type),
            declaring_type=endpoint.declaring_type,
            source=endpoint.qualified_name,
        )

    @staticmethod
    def _output_type(return_type: Optional[TypeRef]) -> Optional[str]:
        if return_type is None:
            return None
        payload = unwrap_generic(return_type)
        if payload.is_void:
            return None
        return qualified_type_name(payload)
