"""Generate command -- turn client metadata into wrapper source files.

Resolves the effective :class:`~sdkwrap.models.GeneratorConfig`, loads the
metadata, runs the generator, and writes the result. Endpoints that cannot
be generated are reported on stderr after the output has been written;
with ``--strict`` their presence makes the command exit with
:data:`~sdkwrap.exit_codes.EXIT_PARTIAL_FAILURE`.
"""

from __future__ import annotations

from typing import Optional

import typer

from sdkwrap.exceptions import SdkwrapError
from sdkwrap.exit_codes import EXIT_PARTIAL_FAILURE
from sdkwrap.output import debug, error, info, success, suggest, warning


def generate_command(
    source: str = typer.Argument(
        help="Manifest path, URL, or '-' for stdin (a module name with --module)."
    ),
    module: bool = typer.Option(
        False, "--module", "-m", help="Treat SOURCE as an importable Python module."
    ),
    target: Optional[str] = typer.Option(
        None, "--target", "-t", help="Target language: powershell, python."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file or directory ('-' for stdout)."
    ),
    group: Optional[bool] = typer.Option(
        None, "--group/--no-group", help="Write one file per API class."
    ),
    append: bool = typer.Option(
        False, "--append", help="Append to existing files instead of overwriting."
    ),
    class_pattern: Optional[str] = typer.Option(
        None, "--class-pattern", "-c", help="Glob selecting API classes by full name."
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Exit non-zero when any endpoint was skipped."
    ),
) -> None:
    """Generate wrapper functions for every endpoint of an API client.

    Example::

        sdkwrap generate netbox-sdk.yaml -o NetBoxPS/ --group
        sdkwrap generate my_client.api --module --target python -o wrappers.py
    """
    from sdkwrap.config import resolve_config
    from sdkwrap.emitters import get_emitter
    from sdkwrap.generator.driver import generate
    from sdkwrap.reflection import load_metadata
    from sdkwrap.writer import write_result

    try:
        config = resolve_config(
            cli_target=target,
            cli_output=output,
            cli_group=group,
            cli_class_pattern=class_pattern,
            cli_append=append or None,
        )
        emitter = get_emitter(config.target)
        debug(f"Loading metadata from {source}")
        metadata = load_metadata(source, module=module)
        result = generate(metadata, config)
        paths = write_result(
            result,
            emitter,
            destination=config.output,
            group=config.group_by_declaring_type,
            append=config.append,
        )
    except SdkwrapError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for path in paths:
        info(f"Wrote {path}")

    if result.endpoint_count == 0:
        warning(f"No endpoints found in {metadata.name}.")
        suggest("Check --class-pattern, or run: sdkwrap inspect endpoints " + source)
        return

    success(
        f"Generated {result.function_count} function(s) "
        f"from {result.endpoint_count} endpoint(s)."
    )
    if result.failures:
        warning(f"{len(result.failures)} item(s) skipped:")
        for failure in result.failures:
            warning(f"  {failure.subject} [{failure.category}]: {failure.message}")
        if strict:
            raise typer.Exit(code=EXIT_PARTIAL_FAILURE)
