"""Classify types as simple (pass-through) or complex (flatten and rebuild).

A fixed allow-list of scalar types, plus every enumeration, is *simple*:
such values are passed straight through to the client call. Everything
else is *complex* and gets flattened into its properties on the generated
function's call surface. Nullable wrappers are unwrapped before the check.

The allow-list holds the CLR names found in .NET client assemblies and the
Python equivalents reported by :mod:`sdkwrap.reflection.python_module`.
"""

from __future__ import annotations

from sdkwrap.models import TypeClass, TypeKind, TypeRef

SIMPLE_TYPE_NAMES: frozenset[str] = frozenset({
    # CLR
    "System.String",
    "System.Boolean",
    "System.Byte",
    "System.SByte",
    "System.Int16",
    "System.UInt16",
    "System.Int32",
    "System.UInt32",
    "System.Int64",
    "System.UInt64",
    "System.Single",
    "System.Double",
    "System.Decimal",
    "System.DateTime",
    "System.DateTimeOffset",
    "System.DateOnly",
    "System.TimeOnly",
    "System.Guid",
    "System.TimeSpan",
    "System.Uri",
    # Python
    "builtins.str",
    "builtins.bool",
    "builtins.int",
    "builtins.float",
    "decimal.Decimal",
    "datetime.datetime",
    "datetime.date",
    "datetime.time",
    "uuid.UUID",
    "datetime.timedelta",
})


def classify(type_ref: TypeRef) -> TypeClass:
    """Return :attr:`TypeClass.SIMPLE` or :attr:`TypeClass.COMPLEX` for *type_ref*.

    Example::

        >>> classify(TypeRef(name="Int32", full_name="System.Int32", nullable=True))
        <TypeClass.SIMPLE: 'simple'>
    """
    underlying = type_ref.unwrap_nullable()
    if underlying.kind == TypeKind.ENUM:
        return TypeClass.SIMPLE
    if not underlying.generic_args and underlying.full_name in SIMPLE_TYPE_NAMES:
        return TypeClass.SIMPLE
    return TypeClass.COMPLEX


def is_simple(type_ref: TypeRef) -> bool:
    return classify(type_ref) == TypeClass.SIMPLE


def is_complex(type_ref: TypeRef) -> bool:
    return classify(type_ref) == TypeClass.COMPLEX
