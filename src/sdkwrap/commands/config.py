"""Config commands -- view and modify global configuration.

Provides the ``sdkwrap config`` sub-command group for reading and
updating the user's :class:`~sdkwrap.models.GlobalConfig`.
"""

from __future__ import annotations

import typer

from sdkwrap.exceptions import ConfigError
from sdkwrap.output import error, format_data, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the current global configuration.

    Example::

        sdkwrap config show --json
    """
    from sdkwrap.config import get_config_dir, load_global_config

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_data(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'generator.target')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the type of the existing field and the
    updated config is validated before it is saved.

    Example::

        sdkwrap config set generator.target python
        sdkwrap config set generator.group_by_declaring_type true
        sdkwrap config set generator.required_markers Required,NotNull
    """
    from sdkwrap.config import load_global_config, save_global_config, set_config_value

    try:
        config = set_config_value(load_global_config(), key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=2) from None

    save_global_config(config)
    success(f"Set {key} = {value}")
