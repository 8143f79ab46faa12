"""Convert an OpenAPI document into an Agent Skill directory.

:func:`convert_openapi_to_skill` runs the whole pipeline: parse the spec into
the IR, render every node with a
:class:`~openapi_to_skills.renderer.TemplateRenderer`, and hand the Markdown
to a :class:`~openapi_to_skills.writer.Writer`. The bundle layout is::

    <output_dir>/<skill name>/
        SKILL.md
        references/
            resources/<tag>.md
            operations/<operationId>.md
            schemas/<prefix>/_index.md
            schemas/<prefix>/<schema>.md
            authentication.md          (only when auth schemes exist)

Every file name derived from the spec goes through
:func:`~openapi_to_skills.naming.to_file_name`.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from openapi_to_skills.exceptions import InvalidUsageError, OutputError
from openapi_to_skills.models import ConvertOptions, SkillDocument
from openapi_to_skills.naming import to_file_name
from openapi_to_skills.output import panel, success, warning
from openapi_to_skills.parser.extractor import parse_spec
from openapi_to_skills.renderer import TemplateRenderer, create_renderer
from openapi_to_skills.writer import Writer, create_writer

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
REFERENCES_DIR = "references"
RESOURCES_DIR = "resources"
OPERATIONS_DIR = "operations"
SCHEMAS_DIR = "schemas"
SCHEMA_INDEX_FILE = "_index.md"
AUTHENTICATION_FILE = "authentication.md"


class ConversionSummary(BaseModel):
    """What a conversion produced (or would produce, in dry-run mode)."""

    model_config = ConfigDict(frozen=True)

    skill_dir: Path
    resources: int = 0
    operations: int = 0
    schema_groups: int = 0
    schemas: int = 0
    auth_schemes: int = 0
    files: list[Path] = Field(default_factory=list)
    dry_run: bool = False


def convert_openapi_to_skill(
    spec: dict[str, Any],
    options: ConvertOptions,
    renderer: Optional[TemplateRenderer] = None,
    writer: Optional[Writer] = None,
) -> ConversionSummary:
    """Convert a decoded OpenAPI document into a skill directory.

    Args:
        spec: The OpenAPI document, already loaded and validated.
        options: Output directory, parser options, templates and flags.
        renderer: Renderer to use. Defaults to one built from
            ``options.template_dir``.
        writer: Writer to use. Defaults to a
            :class:`~openapi_to_skills.writer.DryRunWriter` when
            ``options.dry_run``, else a
            :class:`~openapi_to_skills.writer.FileSystemWriter`.

    Returns:
        A :class:`ConversionSummary` for the generated bundle.

    Raises:
        InvalidUsageError: If no skill name can be derived from the title
            and none was given, or the given name is not a single path
            component.
        OutputError: If the skill directory exists and ``force`` is not
            set, or it cannot be replaced or written.
        TemplateError: If a template directory is missing or a template
            fails to render.
    """
    doc = parse_spec(spec, options.parser)
    if not doc.meta.name:
        raise InvalidUsageError(
            f"Cannot derive a skill name from title {doc.meta.title!r}; pass --name"
        )
    if doc.meta.name in (".", "..") or any(sep in doc.meta.name for sep in "/\\"):
        raise InvalidUsageError(f"Invalid skill name: {doc.meta.name!r}")

    renderer = renderer or create_renderer(options.template_dir)
    writer = writer or create_writer(options.dry_run)

    skill_dir = Path(options.output_dir) / doc.meta.name
    _prepare_skill_dir(skill_dir, force=options.force, dry_run=options.dry_run)

    summary = write_skill_output(doc, skill_dir, renderer, writer, dry_run=options.dry_run)

    verb = "Would generate" if options.dry_run else "Skill generated at"
    panel(
        f"{verb}: {summary.skill_dir}\n"
        f"{summary.resources} resources, {summary.operations} operations, "
        f"{summary.schema_groups} schema groups",
    )
    return summary


def write_skill_output(
    doc: SkillDocument,
    skill_dir: Path,
    renderer: TemplateRenderer,
    writer: Writer,
    dry_run: bool = False,
) -> ConversionSummary:
    """Render *doc* and write the bundle under *skill_dir*.

    Directories are created before any file is written: the skill
    directory, ``resources/``, ``operations/`` and ``schemas/`` up front,
    then one directory per schema group.
    """
    references_dir = skill_dir / REFERENCES_DIR
    resources_dir = references_dir / RESOURCES_DIR
    operations_dir = references_dir / OPERATIONS_DIR
    schemas_dir = references_dir / SCHEMAS_DIR

    for directory in (skill_dir, resources_dir, operations_dir, schemas_dir):
        writer.mkdir(directory)

    files: list[Path] = []

    def emit(path: Path, content: str) -> None:
        logger.debug("Writing %s", path)
        writer.write_file(path, content)
        if path not in files:
            files.append(path)

    emit(skill_dir / SKILL_FILE, renderer.render_skill(doc))
    success(f"Generated {SKILL_FILE}")

    total_operations = 0
    operation_pages: dict[Path, tuple[str, str]] = {}
    for resource in doc.resources:
        file_name = to_file_name(resource.tag)
        emit(resources_dir / f"{file_name}.md", renderer.render_resource(resource))

        for operation in resource.operations:
            op_path = operations_dir / f"{to_file_name(operation.operation_id)}.md"
            endpoint = (operation.method, operation.path)
            if operation_pages.setdefault(op_path, endpoint) != endpoint:
                logger.warning(
                    "Operation %s (%s %s) overwrites an earlier page at %s",
                    operation.operation_id,
                    operation.method,
                    operation.path,
                    op_path,
                )
            emit(op_path, renderer.render_operation(operation))
            total_operations += 1

        success(
            f"Generated resources/{file_name}.md + "
            f"{len(resource.operations)} operation files"
        )

    total_schemas = 0
    for group in doc.schema_groups:
        prefix_dir = schemas_dir / to_file_name(group.prefix)
        writer.mkdir(prefix_dir)
        emit(prefix_dir / SCHEMA_INDEX_FILE, renderer.render_schema_index(group))

        for schema in group.schemas:
            emit(prefix_dir / f"{to_file_name(schema.name)}.md", renderer.render_schema(schema))
            total_schemas += 1

    success(
        f"Generated {len(doc.schema_groups)} schema groups, {total_schemas} schema files"
    )

    if doc.auth_schemes:
        emit(
            references_dir / AUTHENTICATION_FILE,
            renderer.render_authentication(doc.auth_schemes),
        )
        success(f"Generated {REFERENCES_DIR}/{AUTHENTICATION_FILE}")

    return ConversionSummary(
        skill_dir=skill_dir,
        resources=len(doc.resources),
        operations=total_operations,
        schema_groups=len(doc.schema_groups),
        schemas=total_schemas,
        auth_schemes=len(doc.auth_schemes),
        files=files,
        dry_run=dry_run,
    )


def _prepare_skill_dir(skill_dir: Path, force: bool, dry_run: bool) -> None:
    """Refuse or clear an existing skill directory.

    Without *force* an existing path is an error. With *force* it is
    removed, except in dry-run mode where nothing on disk is touched.
    """
    if not skill_dir.exists():
        return

    if not force:
        raise OutputError(
            f"Output directory already exists: {skill_dir}\nUse --force to overwrite."
        )

    if dry_run:
        warning(f"Dry run: {skill_dir} exists and would be replaced")
        return

    logger.debug("Removing existing output %s", skill_dir)
    try:
        if skill_dir.is_dir() and not skill_dir.is_symlink():
            shutil.rmtree(skill_dir)
        else:
            skill_dir.unlink()
    except OSError as exc:
        raise OutputError(f"Cannot remove existing output {skill_dir}: {exc}") from exc
