"""Built-in CLI sub-commands for openapi-to-skills.

This package groups the Typer command modules that form the CLI's top-level
command tree:

* :mod:`~openapi_to_skills.commands.convert` -- generate a skill bundle.
* :mod:`~openapi_to_skills.commands.inspect` -- show the resources,
  schemas, and auth schemes a spec would produce.
* :mod:`~openapi_to_skills.commands.config` -- view and modify the user
  config file.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect`` and ``config``) or a plain callback
function registered directly on the root app (for ``convert``).
"""
