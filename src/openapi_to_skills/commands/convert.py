"""Convert command -- generate an Agent Skill bundle from an OpenAPI spec.

Usage::

    openapi-to-skills convert openapi.yaml -o ./skills
    openapi-to-skills convert https://example.com/openapi.json --group-by tags
    openapi-to-skills convert openapi.yaml --exclude-paths "/internal,re:^/admin/"
    cat openapi.json | openapi-to-skills convert - --dry-run
"""

from __future__ import annotations

from typing import Optional

import typer

from openapi_to_skills.models import GroupBy
from openapi_to_skills.output import debug, error, info, print_data, suggest


def convert_command(
    source: str = typer.Argument(
        metavar="INPUT",
        help="Path or URL of the OpenAPI spec (JSON or YAML), or '-' for stdin."
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output directory. [default: ./output]"
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Skill name (default: derived from the API title)."
    ),
    group_by: Optional[GroupBy] = typer.Option(
        None,
        "--group-by",
        case_sensitive=False,
        help="Group operations by tags, path, or auto (tags, else path). [default: auto]",
    ),
    include_tags: Optional[str] = typer.Option(
        None, "--include-tags", help="Only include these tags (comma-separated)."
    ),
    exclude_tags: Optional[str] = typer.Option(
        None, "--exclude-tags", help="Exclude these tags (comma-separated)."
    ),
    exclude_deprecated: bool = typer.Option(
        False, "--exclude-deprecated", help="Exclude deprecated operations."
    ),
    exclude_paths: Optional[str] = typer.Option(
        None,
        "--exclude-paths",
        help="Exclude paths by prefix, or 're:<regex>' (comma-separated).",
    ),
    templates: Optional[str] = typer.Option(
        None, "--templates", "-t", help="Custom templates directory."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing skill directory."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Render everything but write nothing; list the files."
    ),
) -> None:
    """Convert an OpenAPI spec into an Agent Skill directory.

    Flags override environment variables, which override
    ``./openapi-to-skills.json``, which overrides the user config file.

    Raises:
        typer.Exit: With the error's exit code when loading, rendering, or
            writing fails.

    Example::

        openapi-to-skills convert petstore.yaml -o ./skills --force
    """
    from openapi_to_skills.config import build_convert_options, resolve_config, split_csv
    from openapi_to_skills.converter import convert_openapi_to_skill
    from openapi_to_skills.exceptions import SkillsError
    from openapi_to_skills.parser import load_spec, validate_spec

    try:
        config = resolve_config({
            "output": output,
            "name": name,
            "group_by": group_by.value if group_by else None,
            "include_tags": split_csv(include_tags),
            "exclude_tags": split_csv(exclude_tags),
            "exclude_deprecated": True if exclude_deprecated else None,
            "exclude_paths": split_csv(exclude_paths),
            "templates": templates,
        })
        options = build_convert_options(config, force=force, dry_run=dry_run)
        debug(f"Effective config: {config.model_dump(mode='json')}")

        info(f"Reading OpenAPI spec: {source}")
        raw = load_spec(source)
        openapi_version = validate_spec(raw)

        spec_info = raw["info"]
        tags = [t.get("name") for t in raw.get("tags") or [] if isinstance(t, dict)]
        schemas = (raw.get("components") or {}).get("schemas") or {}
        info(f"API: {spec_info['title']} (v{spec_info.get('version', '?')})")
        info(f"OpenAPI version: {openapi_version}")
        info(f"Paths: {len(raw['paths'])}")
        info(f"Tags: {', '.join(str(t) for t in tags) or 'none'}")
        if schemas:
            info(f"Schemas: {len(schemas)}")

        info("Converting to Agent Skill...")
        summary = convert_openapi_to_skill(raw, options)
    except SkillsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if summary.dry_run:
        for path in summary.files:
            print_data(str(path))
        return

    suggest(f"Review: {summary.skill_dir / 'SKILL.md'}")
