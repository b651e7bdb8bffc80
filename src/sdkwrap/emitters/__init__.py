"""Emitters -- render function descriptors as source in a target language.

Available targets:

* ``powershell`` -- advanced functions (``Verb-Noun``) for a ``.ps1``
  module, see :mod:`~sdkwrap.emitters.powershell`.
* ``python`` -- plain functions with keyword-only parameters, see
  :mod:`~sdkwrap.emitters.python`.

Use :func:`get_emitter` to obtain an instance by target name.
"""

from __future__ import annotations

from sdkwrap.emitters.base import Emitter
from sdkwrap.emitters.powershell import PowerShellEmitter
from sdkwrap.emitters.python import PythonEmitter
from sdkwrap.exceptions import InvalidUsageError

_EMITTERS: dict[str, type[Emitter]] = {
    PowerShellEmitter.name: PowerShellEmitter,
    PythonEmitter.name: PythonEmitter,
}


def available_targets() -> list[str]:
    """Return the supported target names, sorted."""
    return sorted(_EMITTERS)


def get_emitter(target: str) -> Emitter:
    """Return a new emitter for *target*.

    Raises:
        InvalidUsageError: If *target* is not a known emitter.
    """
    try:
        emitter_cls = _EMITTERS[target.lower()]
    except KeyError:
        raise InvalidUsageError(
            f"Unknown target '{target}'. Available: {', '.join(available_targets())}"
        ) from None
    return emitter_cls()


__all__ = ["Emitter", "PowerShellEmitter", "PythonEmitter", "available_targets", "get_emitter"]
