"""sdkwrap -- Generate scripting-language wrapper commands from API client metadata.

This package reads the static method surface of a compiled API client (a
metadata manifest, or a live Python client module) and emits one wrapper
function per client method, plus one constructor function per distinct
nested complex type. Each wrapper gets a discoverable ``Verb-Noun`` name and
a flat, strongly-typed parameter list; complex request objects are rebuilt
inside the wrapper from the flattened values before the client is called.

Typical workflow::

    sdkwrap inspect endpoints netbox.yaml        # preview the command surface
    sdkwrap generate netbox.yaml -o NetBox.psm1   # write PowerShell wrappers

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    writer: Writes generated source text to files or stdout.
"""

__version__ = "0.3.0"
