"""Reflect an importable Python client module into :class:`~sdkwrap.models.SdkMetadata`.

This is the in-process counterpart of the manifest loader: instead of a
checked-in dump, the client classes are inspected directly with
:mod:`inspect` and :func:`typing.get_type_hints`.

Mapping rules:

* Every class defined in the module that is not a data type (enum,
  pydantic model, dataclass) and declares at least one public function
  is an API class. Abstract classes are reported with ``is_abstract=True``.
* Only functions found in the class ``__dict__`` are reported, so
  inherited methods never show up. Names starting with ``_`` are not
  public; dunder names are special names. ``staticmethod`` and
  ``classmethod`` members are static.
* ``Optional[X]`` (or ``X | None``) becomes a nullable ``X``; ``None`` is
  void; subscripted generics keep their arguments; ``Enum`` subclasses are
  enums; numbers, booleans, dates and UUIDs are value types (structs).
* Every class referenced from a signature or a property is defined
  recursively: pydantic models through ``model_fields``, dataclasses
  through :func:`dataclasses.fields` and plain classes through their
  class-level annotations.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import fnmatch
import inspect
import logging
import types
import typing
import uuid
from typing import Any, Optional, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from sdkwrap.models import (
    ApiClass,
    MethodInfo,
    ParameterInfo,
    PropertyInfo,
    SdkMetadata,
    TypeDefinition,
    TypeKind,
    TypeRef,
)

logger = logging.getLogger(__name__)

VALUE_TYPES: frozenset[type] = frozenset({
    int,
    float,
    bool,
    complex,
    decimal.Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
})

PYDANTIC_FACTORY = "model_construct"

REQUIRED_MARKER = "Required"

_VOID = TypeRef(name="None", full_name="builtins.None", kind=TypeKind.VOID)
_OBJECT = TypeRef(name="object", full_name="builtins.object", kind=TypeKind.CLASS)


def _qualified_name(cls: type) -> Optional[str]:
    if "<locals>" in cls.__qualname__:
        return None
    return f"{cls.__module__}.{cls.__qualname__}"


def _is_data_type(cls: type) -> bool:
    return (
        issubclass(cls, enum.Enum)
        or issubclass(cls, BaseModel)
        or dataclasses.is_dataclass(cls)
    )


class _Reflector:
    """Accumulates type definitions while signatures are being reflected."""

    def __init__(self) -> None:
        self._definitions: dict[str, Optional[TypeDefinition]] = {}

    @property
    def definitions(self) -> list[TypeDefinition]:
        return [d for d in self._definitions.values() if d is not None]

    # ------------------------------------------------------------------
    # Type references
    # ------------------------------------------------------------------

    def type_ref(self, annotation: Any) -> TypeRef:
        if annotation is None or annotation is type(None):
            return _VOID
        if annotation is Any or annotation is inspect.Parameter.empty:
            return _OBJECT

        origin = get_origin(annotation)
        if origin is typing.Union or origin is types.UnionType:
            members = [a for a in get_args(annotation) if a is not type(None)]
            if len(members) == 1 and len(members) != len(get_args(annotation)):
                return self.type_ref(members[0]).model_copy(update={"nullable": True})
            return TypeRef(
                name="Union",
                full_name="typing.Union",
                generic_args=tuple(self.type_ref(a) for a in get_args(annotation)),
            )
        if origin is not None:
            base = self.type_ref(origin)
            args = tuple(
                self.type_ref(a) for a in get_args(annotation) if a is not Ellipsis
            )
            return base.model_copy(update={"generic_args": args})

        if not isinstance(annotation, type):
            # String forward references that could not be resolved, TypeVars, ...
            return TypeRef(name=str(annotation))

        if issubclass(annotation, enum.Enum):
            kind = TypeKind.ENUM
        elif annotation in VALUE_TYPES:
            kind = TypeKind.STRUCT
        else:
            kind = TypeKind.CLASS
        ref = TypeRef(
            name=annotation.__name__,
            full_name=_qualified_name(annotation),
            kind=kind,
        )
        if kind == TypeKind.CLASS and annotation.__module__ != "builtins":
            self.define(annotation, ref)
        return ref

    # ------------------------------------------------------------------
    # Definitions
    # ------------------------------------------------------------------

    def define(self, cls: type, ref: TypeRef) -> None:
        if ref.key in self._definitions:
            return
        # Placeholder so self-referencing models terminate.
        self._definitions[ref.key] = None
        if issubclass(cls, BaseModel):
            definition = self._define_model(cls, ref)
        elif dataclasses.is_dataclass(cls):
            definition = self._define_dataclass(cls, ref)
        else:
            definition = self._define_plain(cls, ref)
        self._definitions[ref.key] = definition

    def _define_model(self, cls: type[BaseModel], ref: TypeRef) -> TypeDefinition:
        frozen = bool(cls.model_config.get("frozen", False))
        properties = []
        for name, field in cls.model_fields.items():
            properties.append(PropertyInfo(
                name=name,
                type=self.type_ref(field.annotation),
                can_write=not (frozen or field.frozen),
                attributes=[REQUIRED_MARKER] if field.is_required() else [],
            ))
        all_defaulted = not any(f.is_required() for f in cls.model_fields.values())
        return TypeDefinition(
            type=ref,
            properties=properties,
            has_default_constructor=all_defaulted,
            factory_method=None if all_defaulted else PYDANTIC_FACTORY,
        )

    def _define_dataclass(self, cls: type, ref: TypeRef) -> TypeDefinition:
        hints = _resolve_hints(cls)
        frozen = cls.__dataclass_params__.frozen
        properties = []
        required_any = False
        for field in dataclasses.fields(cls):
            required = (
                field.default is dataclasses.MISSING
                and field.default_factory is dataclasses.MISSING
            )
            required_any = required_any or (required and field.init)
            properties.append(PropertyInfo(
                name=field.name,
                type=self.type_ref(hints.get(field.name, field.type)),
                can_write=not frozen,
                attributes=[REQUIRED_MARKER] if required else [],
            ))
        return TypeDefinition(
            type=ref,
            properties=properties,
            has_default_constructor=not required_any,
        )

    def _define_plain(self, cls: type, ref: TypeRef) -> TypeDefinition:
        hints = _resolve_hints(cls)
        properties = [
            PropertyInfo(name=name, type=self.type_ref(annotation))
            for name, annotation in hints.items()
            if not name.startswith("_") and get_origin(annotation) is not typing.ClassVar
        ]
        return TypeDefinition(
            type=ref,
            properties=properties,
            has_default_constructor=_has_parameterless_init(cls),
        )

    # ------------------------------------------------------------------
    # API classes
    # ------------------------------------------------------------------

    def api_class(self, cls: type) -> ApiClass:
        methods = []
        for name, member in cls.__dict__.items():
            is_static = isinstance(member, (staticmethod, classmethod))
            func = member.__func__ if is_static else member
            if not inspect.isfunction(func):
                continue
            method = self.method(name, func, is_static, bound=not isinstance(member, staticmethod))
            if method is not None:
                methods.append(method)
        return ApiClass(
            type=TypeRef(name=cls.__name__, full_name=_qualified_name(cls)),
            is_abstract=inspect.isabstract(cls),
            methods=methods,
        )

    def method(self, name: str, func: Any, is_static: bool, bound: bool = True) -> Optional[MethodInfo]:
        try:
            hints = get_type_hints(func)
        except (NameError, TypeError) as exc:
            logger.warning("Skipping %s: cannot resolve type hints (%s)", func.__qualname__, exc)
            return None

        params = list(inspect.signature(func).parameters.values())
        if bound:
            params = params[1:]
        parameters = []
        for param in params:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            parameters.append(ParameterInfo(
                name=param.name,
                type=self.type_ref(hints.get(param.name, inspect.Parameter.empty)),
                position=len(parameters),
            ))

        return_type = self.type_ref(hints["return"]) if "return" in hints else None
        return MethodInfo(
            name=name,
            return_type=return_type,
            parameters=parameters,
            is_public=not name.startswith("_"),
            is_static=is_static,
            is_special_name=name.startswith("__") and name.endswith("__"),
        )


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError) as exc:
        logger.warning("Using raw annotations for %s (%s)", cls.__qualname__, exc)
        return dict(getattr(cls, "__annotations__", {}))


def _has_parameterless_init(cls: type) -> bool:
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not p.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


def _is_api_class(cls: type) -> bool:
    if _is_data_type(cls):
        return False
    return any(
        not name.startswith("_")
        and (inspect.isfunction(m) or isinstance(m, (staticmethod, classmethod)))
        for name, m in cls.__dict__.items()
    )


def reflect_module(module: types.ModuleType, class_pattern: Optional[str] = None) -> SdkMetadata:
    """Reflect the API classes defined in *module*.

    Args:
        module: An imported client module.
        class_pattern: Optional ``fnmatch`` pattern over the fully qualified
            class names (``module.Class``).

    Returns:
        Metadata listing the API classes in definition order and every type
        reachable from their signatures.
    """
    reflector = _Reflector()
    api_classes = []
    for cls in vars(module).values():
        if not inspect.isclass(cls) or cls.__module__ != module.__name__:
            continue
        if not _is_api_class(cls):
            continue
        if class_pattern and not fnmatch.fnmatchcase(f"{module.__name__}.{cls.__qualname__}", class_pattern):
            continue
        api_classes.append(reflector.api_class(cls))

    logger.debug(
        "Reflected %d API class(es) and %d type(s) from %s",
        len(api_classes), len(reflector.definitions), module.__name__,
    )
    version = getattr(module, "__version__", None)
    return SdkMetadata(
        name=module.__name__,
        version=str(version) if version is not None else None,
        types=reflector.definitions,
        api_classes=api_classes,
    )
