"""Inspect commands -- preview what a spec converts into.

Provides the ``openapi-to-skills inspect`` sub-command group with read-only
commands that parse a spec into the skill IR (applying the same grouping and
filters as ``convert``) and print it as tables instead of writing files:
resources, schema groups, and security schemes.
"""

from __future__ import annotations

from typing import Optional

import typer

from openapi_to_skills.models import GroupBy, SkillDocument
from openapi_to_skills.output import error, get_output, info

inspect_app = typer.Typer(no_args_is_help=True)

_FIELD_PREVIEW = 5


def _load_document(
    source: str,
    group_by: Optional[GroupBy] = None,
    include_tags: Optional[str] = None,
    exclude_tags: Optional[str] = None,
    exclude_deprecated: bool = False,
    exclude_paths: Optional[str] = None,
) -> SkillDocument:
    """Load, validate and parse *source* with the effective filter config.

    Raises:
        typer.Exit: With the error's exit code when the config or the spec
            cannot be loaded.
    """
    from openapi_to_skills.config import build_convert_options, resolve_config, split_csv
    from openapi_to_skills.exceptions import SkillsError
    from openapi_to_skills.parser import load_spec, parse_spec, validate_spec

    try:
        config = resolve_config({
            "group_by": group_by.value if group_by else None,
            "include_tags": split_csv(include_tags),
            "exclude_tags": split_csv(exclude_tags),
            "exclude_deprecated": True if exclude_deprecated else None,
            "exclude_paths": split_csv(exclude_paths),
        })
        options = build_convert_options(config)
        raw = load_spec(source)
        validate_spec(raw)
    except SkillsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    return parse_spec(raw, options.parser)


@inspect_app.command("resources")
def inspect_resources(
    source: str = typer.Argument(metavar="INPUT", help="Path or URL of the OpenAPI spec."),
    group_by: Optional[GroupBy] = typer.Option(
        None, "--group-by", case_sensitive=False, help="tags, path, or auto."
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
        None, "--exclude-paths", help="Exclude paths by prefix or 're:<regex>'."
    ),
    operations: bool = typer.Option(
        False, "--operations", help="List every operation instead of one row per resource."
    ),
) -> None:
    """List the resources (and optionally operations) a spec produces.

    Resources appear in output order: most operations first.

    Example::

        openapi-to-skills inspect resources petstore.yaml
        openapi-to-skills inspect resources petstore.yaml --group-by path --operations
    """
    doc = _load_document(
        source, group_by, include_tags, exclude_tags, exclude_deprecated, exclude_paths
    )

    if not doc.resources:
        info("No operations left after filtering.")
        return

    output = get_output()
    if operations:
        headers = ["Resource", "Method", "Path", "Operation ID", "Summary"]
        rows = [
            [
                resource.tag,
                op.method,
                op.path,
                op.operation_id,
                (op.summary or "-") + (" (deprecated)" if op.deprecated else ""),
            ]
            for resource in doc.resources
            for op in resource.operations
        ]
        output.print_table(headers, rows, title=f"{doc.meta.title} -- Operations ({len(rows)})")
        return

    headers = ["Resource", "Operations", "Description"]
    rows = [
        [resource.tag, str(len(resource.operations)), resource.description or "-"]
        for resource in doc.resources
    ]
    output.print_table(headers, rows, title=f"{doc.meta.title} -- Resources ({len(rows)})")


@inspect_app.command("schemas")
def inspect_schemas(
    source: str = typer.Argument(metavar="INPUT", help="Path or URL of the OpenAPI spec."),
) -> None:
    """List component schemas grouped by name prefix.

    Shows each schema's group, kind, and up to five field names.

    Example::

        openapi-to-skills inspect schemas petstore.yaml
    """
    doc = _load_document(source)

    if not doc.schema_groups:
        info("No schemas defined in this spec.")
        return

    output = get_output()
    headers = ["Group", "Schema", "Type", "Fields"]
    rows: list[list[str]] = []
    for group in doc.schema_groups:
        for schema in group.schemas:
            names = [field.name for field in schema.fields or []]
            fields = ", ".join(names[:_FIELD_PREVIEW])
            if len(names) > _FIELD_PREVIEW:
                fields += "..."
            rows.append([group.prefix, schema.name, schema.type.value, fields or "-"])

    output.print_table(headers, rows, title=f"Schemas ({len(rows)})")


@inspect_app.command("auth")
def inspect_auth(
    source: str = typer.Argument(metavar="INPUT", help="Path or URL of the OpenAPI spec."),
) -> None:
    """Show security schemes defined in the spec.

    Example::

        openapi-to-skills inspect auth petstore.yaml
    """
    doc = _load_document(source)

    if not doc.auth_schemes:
        info("No security schemes defined.")
        return

    output = get_output()
    headers = ["Name", "Type", "Details", "Description"]
    rows: list[list[str]] = []
    for scheme in doc.auth_schemes:
        if scheme.type == "apiKey":
            details = f"{scheme.param_name} in {scheme.location}"
        elif scheme.type == "http":
            details = scheme.scheme or "-"
        elif scheme.type == "oauth2":
            details = ", ".join(flow.name for flow in scheme.flows or []) or "-"
        elif scheme.type == "openIdConnect":
            details = scheme.openid_connect_url or "-"
        else:
            details = "-"
        rows.append([scheme.name, scheme.type, details, (scheme.description or "-")[:60]])

    output.print_table(headers, rows, title="Security Schemes")
