"""Render function descriptors as PowerShell advanced functions.

Each function becomes ``function Verb-Noun { ... }`` with
``[CmdletBinding()]``, an ``[OutputType()]`` attribute when the function
returns something, and a ``param()`` block whose entries carry
``[Parameter(Mandatory = $true, Position = n)]`` and a type constraint.
Supplied-parameter checks use ``$PSBoundParameters.ContainsKey``, so an
explicit ``$null`` or ``0`` is still written to the object.
"""

from __future__ import annotations

from typing import Any

from sdkwrap.emitters.base import Emitter
from sdkwrap.models import FunctionDescriptor


class PowerShellEmitter(Emitter):
    name = "powershell"
    file_extension = ".ps1"
    function_template = "powershell_function.ps1.j2"
    preamble_template = "powershell_preamble.ps1.j2"

    def function_context(self, function: FunctionDescriptor) -> dict[str, Any]:
        return {"command_name": f"{function.verb}-{function.noun}"}
