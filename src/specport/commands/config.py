"""Config commands -- view and modify global configuration.

Provides the ``specport config`` sub-command group for reading and updating
the user's global configuration file (:class:`~specport.models.GlobalConfig`).
"""

from __future__ import annotations

import typer

from specport.exceptions import ConfigError
from specport.output import error, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show import settings after env and project overrides.",
    ),
) -> None:
    """Show current configuration.

    Prints the config directory path on stderr and the configuration as
    JSON on stdout. With ``--effective`` only the resolved import settings
    are printed.

    Example::

        specport config show
        specport config show --effective
    """
    from specport.config import get_config_dir, load_global_config, resolve_settings

    try:
        data = (
            resolve_settings().model_dump(mode="json")
            if effective
            else load_global_config().model_dump(mode="json")
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    get_output().print_json(data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'importer.on_ref_cycle')."
    ),
    value: str = typer.Argument(help="Value to set (JSON for lists and numbers)."),
) -> None:
    """Set a configuration value.

    Raises:
        typer.Exit: With the config error exit code if the key is unknown
            or the value fails validation.

    Example::

        specport config set importer.on_ref_cycle error
        specport config set importer.raml_excluded_keys '["uses", "types"]'
        specport config set output.format json
    """
    from specport.config import set_config_value

    try:
        set_config_value(key, value)
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Set {key} = {value}")
