"""Render function descriptors as plain Python functions.

Generated functions take the bound client as their only positional
parameter; everything else is keyword-only. Optional parameters written
into an object default to the ``_UNSET`` sentinel so that "explicitly
supplied" can be told apart from ``None``; optional arguments passed
straight through default to ``None``. Types are looked up at call time by
qualified name through the ``_resolve`` helper emitted in the file
preamble, so the generated module imports nothing from the client package
up front.
"""

from __future__ import annotations

import keyword
import re
from typing import Any

from sdkwrap.emitters.base import Emitter
from sdkwrap.models import ConditionalAssign, FunctionDescriptor, FunctionKind


def to_snake_case(name: str) -> str:
    """Convert a client identifier to a valid snake_case Python name.

    Example::

        >>> to_snake_case("DeviceRole")
        'device_role'
        >>> to_snake_case("dryRun")
        'dry_run'
        >>> to_snake_case("Class")
        'class_'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result)
    result = result.lower()
    result = re.sub(r"[^a-z0-9_]", "_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    if not result:
        result = "param"
    if result[0].isdigit():
        result = f"_{result}"
    if keyword.iskeyword(result):
        result = f"{result}_"
    return result


def _signature(function: FunctionDescriptor) -> str:
    assigned = {s.parameter for s in function.body if isinstance(s, ConditionalAssign)}
    ordered = sorted(function.parameters, key=lambda p: p.position)
    parts: list[str] = []
    for index, param in enumerate(ordered):
        name = to_snake_case(param.name)
        if index == 0 and function.kind == FunctionKind.WRAPPER:
            parts.append(name)
            continue
        if "*" not in parts:
            parts.append("*")
        if param.required:
            parts.append(name)
        else:
            parts.append(f"{name}=_UNSET" if param.name in assigned else f"{name}=None")
    return ", ".join(parts)


def _summary(function: FunctionDescriptor) -> str:
    if function.kind == FunctionKind.CONSTRUCTOR:
        return f"Build a ``{function.source}`` instance."
    return f"Call ``{function.source}``."


class PythonEmitter(Emitter):
    name = "python"
    file_extension = ".py"
    function_template = "python_function.py.j2"
    preamble_template = "python_preamble.py.j2"

    def filters(self):
        return {"snake": to_snake_case}

    def function_context(self, function: FunctionDescriptor) -> dict[str, Any]:
        return {
            "function_name": to_snake_case(function.name),
            "signature": _signature(function),
            "summary": _summary(function),
        }
