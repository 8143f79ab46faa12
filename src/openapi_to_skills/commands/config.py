"""Config commands -- view and modify the user configuration.

Provides the ``openapi-to-skills config`` sub-command group for reading,
updating, and resetting the user's config file
(:class:`~openapi_to_skills.models.ConvertConfig`). The file holds defaults
for ``convert`` such as the output directory, grouping strategy, filters,
and custom templates.
"""

from __future__ import annotations

import typer

from openapi_to_skills.output import error, format_data, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False,
        "--effective",
        help="Show the merged result of user config, project config and env vars.",
    ),
) -> None:
    """Show current configuration.

    Prints the config file path followed by the configuration (table or
    JSON, depending on the active output mode).

    Example::

        openapi-to-skills config show
        openapi-to-skills --json config show --effective
    """
    from openapi_to_skills.config import load_user_config, resolve_config, user_config_path
    from openapi_to_skills.exceptions import SkillsError

    try:
        config = resolve_config() if effective else load_user_config()
    except SkillsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config file: {user_config_path()}")
    format_data(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (e.g., 'output', 'group_by', 'exclude_paths')."),
    value: str = typer.Argument(help="Value to set. Lists are comma-separated."),
) -> None:
    """Set a configuration value.

    The value is coerced to the key's type and validated before the file
    is saved.

    Example::

        openapi-to-skills config set output ./skills
        openapi-to-skills config set group_by tags
        openapi-to-skills config set exclude_paths "/internal,re:^/admin/"
        openapi-to-skills config set templates none
    """
    from openapi_to_skills.config import load_user_config, save_user_config, set_config_value
    from openapi_to_skills.exceptions import SkillsError

    try:
        config = set_config_value(load_user_config(), key, value)
        save_user_config(config)
    except SkillsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success(f"Set {key} = {config.model_dump(mode='json')[key]}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Reset configuration to defaults.

    Replaces the user config file with a fresh
    :class:`~openapi_to_skills.models.ConvertConfig`. Asks for confirmation
    unless ``--yes`` is given.

    Raises:
        typer.Exit: If the user declines confirmation.

    Example::

        openapi-to-skills config reset --yes
    """
    from openapi_to_skills.config import save_user_config
    from openapi_to_skills.exceptions import SkillsError
    from openapi_to_skills.models import ConvertConfig

    if not yes:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    try:
        save_user_config(ConvertConfig())
    except SkillsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    success("Configuration reset to defaults.")
