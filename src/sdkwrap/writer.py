"""Write rendered output units to stdout, a file, or a directory.

Destinations:

* ``None`` or ``"-"`` -- everything goes to stdout as one stream, with a
  single preamble.
* a directory (or any path when *group* is set) -- one
  ``<unit><extension>`` file per output unit.
* a file path -- all units appended to that one file.

Files are truncated on the first write of a run unless *append* is set;
the preamble is only written to files that start out empty. Every unit is
appended inside its own ``with`` block so the handle is closed even when
rendering fails half-way.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from sdkwrap.emitters.base import Emitter
from sdkwrap.exceptions import OutputError
from sdkwrap.models import GenerationResult, OutputUnit
from sdkwrap.output import print_source

logger = logging.getLogger(__name__)

STDOUT = "-"


def render_units(emitter: Emitter, units: Iterable[OutputUnit]) -> str:
    """Render *units* as one document: preamble, then each unit in order."""
    parts = [emitter.render_preamble()]
    parts.extend(emitter.render_unit(unit.functions()) for unit in units)
    return "\n".join(parts)


def write_result(
    result: GenerationResult,
    emitter: Emitter,
    destination: Optional[str] = None,
    group: bool = False,
    append: bool = False,
) -> list[Path]:
    """Write every unit of *result* and return the paths written.

    Args:
        result: The generation result.
        emitter: Renders descriptors in the target language.
        destination: Output file or directory; ``None`` or ``"-"`` for
            stdout.
        group: Write one file per unit into the *destination* directory.
        append: Append to existing files instead of truncating them.

    Returns:
        The distinct file paths written, in order. Empty for stdout.

    Raises:
        OutputError: If a destination cannot be created or written.
    """
    if not result.units:
        return []

    if destination is None or destination == STDOUT:
        print_source(render_units(emitter, result.units).rstrip("\n"), emitter.name)
        return []

    target = Path(destination)
    if group:
        if target.exists() and not target.is_dir():
            raise OutputError(f"Grouped output needs a directory, got file: {target}")
        paths = []
        for unit in result.units:
            path = target / f"{unit.name}{emitter.file_extension}"
            _write_units(path, [unit], emitter, append)
            paths.append(path)
        return paths

    if target.is_dir():
        target = target / f"{result.units[0].name}{emitter.file_extension}"
    _write_units(target, result.units, emitter, append)
    return [target]


def _write_units(path: Path, units: list[OutputUnit], emitter: Emitter, append: bool) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if not append or not path.is_file() or path.stat().st_size == 0:
            with path.open("w", encoding="utf-8") as handle:
                handle.write(emitter.render_preamble() + "\n")
        for unit in units:
            with path.open("a", encoding="utf-8") as handle:
                handle.write(emitter.render_unit(unit.functions()) + "\n")
    except OSError as exc:
        raise OutputError(f"Cannot write {path}: {exc}") from exc
    logger.debug("Wrote %d unit(s) to %s", len(units), path)
