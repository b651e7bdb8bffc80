"""Inspect commands -- show what the generator sees in a manifest or module.

Read-only views over the reflected metadata:

* ``sdkwrap inspect endpoints`` -- every discovered endpoint with the
  command name it would get.
* ``sdkwrap inspect types`` -- every defined type with its classification
  and construction path.
"""

from __future__ import annotations

from typing import Optional

import typer

from sdkwrap.exceptions import GenerationError, SdkwrapError
from sdkwrap.models import EndpointDescriptor, SdkMetadata, TypeDefinition
from sdkwrap.output import error, get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


def _load(source: str, module: bool) -> SdkMetadata:
    from sdkwrap.reflection import load_metadata

    try:
        return load_metadata(source, module=module)
    except SdkwrapError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _command_name(endpoint: EndpointDescriptor) -> str:
    from sdkwrap.generator.driver import command_parts

    try:
        verb, noun = command_parts(endpoint)
        return f"{verb.value}-{noun}"
    except GenerationError as exc:
        return f"({exc.category})"


def _construction_path(definition: TypeDefinition) -> str:
    if definition.has_default_constructor:
        return "default constructor"
    if definition.factory_method:
        return f"factory {definition.factory_method}()"
    return "none"


@inspect_app.command("endpoints")
def inspect_endpoints(
    source: str = typer.Argument(help="Manifest path, URL, '-', or module name."),
    module: bool = typer.Option(False, "--module", "-m", help="SOURCE is a Python module."),
    class_pattern: Optional[str] = typer.Option(
        None, "--class-pattern", "-c", help="Glob selecting API classes by full name."
    ),
) -> None:
    """List the endpoints that would be wrapped.

    Example::

        sdkwrap inspect endpoints netbox-sdk.yaml
    """
    from sdkwrap.reflection import discover_endpoints

    metadata = _load(source, module)
    endpoints = discover_endpoints(metadata, class_pattern)
    if not endpoints:
        info("No endpoints found.")
        return

    headers = ["Class", "Method", "Command", "Parameters"]
    rows = [
        [
            ep.declaring_type,
            ep.method_name,
            _command_name(ep),
            str(len(ep.parameters)),
        ]
        for ep in endpoints
    ]
    get_output().print_table(headers, rows, title=f"{metadata.name} -- Endpoints ({len(rows)})")


@inspect_app.command("types")
def inspect_types(
    source: str = typer.Argument(help="Manifest path, URL, '-', or module name."),
    module: bool = typer.Option(False, "--module", "-m", help="SOURCE is a Python module."),
) -> None:
    """List the types defined in the metadata.

    Example::

        sdkwrap inspect types netbox-sdk.yaml --json
    """
    from sdkwrap.generator.classifier import classify

    metadata = _load(source, module)
    if not metadata.types:
        info("No types defined.")
        return

    headers = ["Type", "Kind", "Class", "Construction", "Writable"]
    rows = []
    for definition in metadata.types:
        writable = [p.name for p in definition.properties if p.can_write]
        rows.append([
            definition.type.key,
            definition.type.kind.value,
            classify(definition.type).value,
            _construction_path(definition),
            str(len(writable)),
        ])
    get_output().print_table(headers, rows, title=f"{metadata.name} -- Types ({len(rows)})")
