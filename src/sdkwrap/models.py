"""Canonical Pydantic models shared across all sdkwrap modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`GeneratorConfig`, :class:`OutputConfig`, and :class:`GlobalConfig`.

**Metadata models** -- the static description of an API client produced by
the reflection layer:
    :class:`TypeKind`, :class:`TypeRef`, :class:`PropertyInfo`,
    :class:`TypeDefinition`, :class:`ParameterInfo`, :class:`MethodInfo`,
    :class:`ApiClass`, and :class:`SdkMetadata`.

**Pipeline models** -- intermediate shapes built per endpoint:
    :class:`Verb`, :class:`TypeClass`, :class:`EndpointDescriptor`,
    :class:`ParameterGroup`, and :class:`FlattenedParameter`.

**Descriptor models** -- the serializer-agnostic description of generated
functions handed to an emitter:
    :class:`ParameterSpec`, the statement models, :class:`FunctionDescriptor`,
    :class:`GenerationFailure`, :class:`OutputUnit`, and
    :class:`GenerationResult`.
"""

from __future__ import annotations

import enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration ---


class GeneratorConfig(BaseModel):
    """Settings that control a generation run.

    Loaded from the global config, overlaid by the project-local
    ``sdkwrap.json``, environment variables, and CLI flags. See
    :func:`~sdkwrap.config.resolve_config` for the precedence chain.
    """

    target: str = Field(
        default="powershell", description="Emitter target: powershell, python"
    )
    group_by_declaring_type: bool = Field(
        default=False,
        description="Write one output unit per API class instead of a single unit",
    )
    output: Optional[str] = Field(
        default=None, description="Output file or directory ('-' or unset for stdout)"
    )
    append: bool = Field(
        default=False, description="Append to existing output files instead of truncating"
    )
    class_pattern: Optional[str] = Field(
        default=None, description="fnmatch pattern selecting API classes by full name"
    )
    required_markers: list[str] = Field(
        default_factory=lambda: ["Required", "Mandatory"],
        description="Attribute-name substrings that mark a property as required",
    )
    handle_name: str = Field(
        default="Sdk", description="Name of the bound client parameter on every wrapper"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )
    no_color: bool = Field(default=False, description="Disable colour output")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/sdkwrap/config.json``."""

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Metadata ---


class TypeKind(str, enum.Enum):
    """The broad category of a reflected type."""

    CLASS = "class"
    STRUCT = "struct"
    ENUM = "enum"
    INTERFACE = "interface"
    VOID = "void"


class TypeRef(BaseModel):
    """A reference to a type as it appears in a signature or property.

    ``full_name`` is ``None`` when the reflection source could not produce a
    fully qualified name (anonymous or compiler-generated types). Generic
    constructions carry their arguments in ``generic_args``; ``nullable``
    marks a nullable wrapper around a value type (``int?`` in C#,
    ``Optional[int]`` in Python).

    Instances are frozen and hashable so they can be used as dict keys.
    Use :attr:`key` when two references should compare equal regardless of
    nullability.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    full_name: Optional[str] = None
    kind: TypeKind = TypeKind.CLASS
    generic_args: tuple[TypeRef, ...] = ()
    nullable: bool = False

    @property
    def is_value_type(self) -> bool:
        """Whether the type is a value type (struct or enum)."""
        return self.kind in (TypeKind.STRUCT, TypeKind.ENUM)

    @property
    def is_void(self) -> bool:
        return self.kind == TypeKind.VOID

    @property
    def key(self) -> str:
        """Identity string used for lookups and deduplication."""
        base = self.full_name or self.name
        if self.generic_args:
            args = ",".join(arg.key for arg in self.generic_args)
            return f"{base}[{args}]"
        return base

    def unwrap_nullable(self) -> TypeRef:
        """Return the underlying type of a nullable wrapper (or ``self``)."""
        if not self.nullable:
            return self
        return self.model_copy(update={"nullable": False})

    def display_name(self) -> str:
        """Human-readable rendering, e.g. ``Task<DeviceListResponse>`` or ``Int32?``."""
        text = self.name
        if self.generic_args:
            args = ", ".join(arg.display_name() for arg in self.generic_args)
            text = f"{text}<{args}>"
        if self.nullable:
            text += "?"
        return text


class PropertyInfo(BaseModel):
    """A public instance property of a complex type."""

    name: str
    type: TypeRef
    can_write: bool = True
    attributes: list[str] = Field(
        default_factory=list, description="Attribute / marker names on the property"
    )


class TypeDefinition(BaseModel):
    """The introspectable shape of a complex type.

    ``properties`` lists public instance properties in declaration order.
    When ``has_default_constructor`` is false, instances can only be
    created through ``factory_method`` (a static method returning a default
    instance); when that is missing too, the type cannot be constructed by
    generated code.
    """

    type: TypeRef
    properties: list[PropertyInfo] = Field(default_factory=list)
    has_default_constructor: bool = True
    factory_method: Optional[str] = None


class ParameterInfo(BaseModel):
    """One declared parameter of a client method."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeRef
    position: int


class MethodInfo(BaseModel):
    """A method declared (or inherited) on an API class."""

    name: str
    return_type: Optional[TypeRef] = None
    parameters: list[ParameterInfo] = Field(default_factory=list)
    is_public: bool = True
    is_static: bool = False
    is_special_name: bool = Field(
        default=False, description="Compiler-generated accessor or operator"
    )
    declared: bool = Field(
        default=True, description="Declared on this class rather than inherited"
    )


class ApiClass(BaseModel):
    """A client class whose methods are candidate endpoints."""

    type: TypeRef
    is_abstract: bool = False
    methods: list[MethodInfo] = Field(default_factory=list)


class SdkMetadata(BaseModel):
    """Complete static description of an API client library.

    Produced by :func:`~sdkwrap.reflection.manifest.extract_metadata` or
    :func:`~sdkwrap.reflection.python_module.reflect_module` and consumed
    by the emission driver.
    """

    name: str
    version: Optional[str] = None
    types: list[TypeDefinition] = Field(default_factory=list)
    api_classes: list[ApiClass] = Field(default_factory=list)

    def find_type(self, ref: TypeRef) -> Optional[TypeDefinition]:
        """Return the definition matching *ref* (ignoring nullability), if any."""
        key = ref.unwrap_nullable().key
        for definition in self.types:
            if definition.type.key == key:
                return definition
        return None


# --- Pipeline ---


class Verb(str, enum.Enum):
    """Command verbs derived from client method-name prefixes."""

    READ = "Read"
    NEW = "New"
    REMOVE = "Remove"
    MODIFY = "Modify"


class TypeClass(str, enum.Enum):
    """Classification deciding pass-through vs. flatten-and-reconstruct."""

    SIMPLE = "simple"
    COMPLEX = "complex"


class EndpointDescriptor(BaseModel):
    """One discoverable API operation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    declaring_type: str
    method_name: str
    return_type: Optional[TypeRef] = None
    parameters: tuple[ParameterInfo, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.declaring_type}.{self.method_name}"


class ParameterGroup(BaseModel):
    """The shape of one original parameter.

    Complex groups carry the properties lifted to the call surface; simple
    groups have none. ``position`` is the zero-based declared index.
    """

    name: str
    type: TypeRef
    is_complex: bool
    properties: list[PropertyInfo] = Field(default_factory=list)
    position: int


class FlattenedParameter(BaseModel):
    """A call-surface parameter plus the origin needed to reconstruct the call.

    When ``source_property_name`` is ``None`` the parameter is an original
    simple parameter passed straight through; otherwise it is a lifted
    property written back into a ``source_group_type`` instance.
    """

    name: str
    type: TypeRef
    is_complex: bool
    source_group_name: str
    source_group_position: int
    source_group_type: TypeRef
    source_property_name: Optional[str] = None

    @property
    def is_property_sourced(self) -> bool:
        return self.source_property_name is not None


# --- Descriptors ---


class ParameterSpec(BaseModel):
    """One parameter of a generated function.

    ``type_name`` is ``None`` for untyped parameters (the bound client
    handle).
    """

    name: str
    type_name: Optional[str] = None
    required: bool = False
    position: int


class ConstructInstance(BaseModel):
    """``variable = new type_name`` (or ``type_name.factory_method()``)."""

    kind: Literal["construct"] = "construct"
    variable: str
    type_name: str
    factory_method: Optional[str] = None


class ConditionalAssign(BaseModel):
    """``if parameter was explicitly supplied: variable.member = parameter``."""

    kind: Literal["conditional_assign"] = "conditional_assign"
    variable: str
    member: str
    parameter: str


class InvokeMethod(BaseModel):
    """Invoke ``receiver.method(*arguments)`` and emit its result.

    Arguments are variable names in positional order.
    """

    kind: Literal["invoke"] = "invoke"
    receiver: str
    method: str
    arguments: list[str] = Field(default_factory=list)


class EmitValue(BaseModel):
    """Return / emit the value held in ``variable``."""

    kind: Literal["emit"] = "emit"
    variable: str


Statement = Annotated[
    Union[ConstructInstance, ConditionalAssign, InvokeMethod, EmitValue],
    Field(discriminator="kind"),
]


class FunctionKind(str, enum.Enum):
    WRAPPER = "wrapper"
    CONSTRUCTOR = "constructor"


class FunctionDescriptor(BaseModel):
    """The abstract, serialization-ready shape of one generated function.

    ``name`` is the joined ``<Verb><Noun>`` form; emitters that use another
    naming convention (``Verb-Noun``, ``verb_noun``) build it from ``verb``
    and ``noun``. ``source`` identifies the endpoint or type the function
    was built from, for reports.
    """

    name: str
    verb: str
    noun: str
    kind: FunctionKind
    parameters: list[ParameterSpec] = Field(default_factory=list)
    body: list[Statement] = Field(default_factory=list)
    output_type: Optional[str] = None
    declaring_type: Optional[str] = None
    source: str = ""


class GenerationFailure(BaseModel):
    """An endpoint or type that was skipped, and why."""

    subject: str
    category: str
    message: str


class OutputUnit(BaseModel):
    """One logical output unit: constructors followed by wrappers."""

    name: str
    constructors: list[FunctionDescriptor] = Field(default_factory=list)
    wrappers: list[FunctionDescriptor] = Field(default_factory=list)

    def functions(self) -> Iterator[FunctionDescriptor]:
        yield from self.constructors
        yield from self.wrappers


class GenerationResult(BaseModel):
    """Everything a generation run produced."""

    units: list[OutputUnit] = Field(default_factory=list)
    failures: list[GenerationFailure] = Field(default_factory=list)
    endpoint_count: int = 0

    @property
    def function_count(self) -> int:
        return sum(len(u.constructors) + len(u.wrappers) for u in self.units)


TypeRef.model_rebuild()
