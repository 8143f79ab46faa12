"""Render the skill IR into Markdown with Jinja2 templates.

The renderer maps each IR node onto one Markdown string. Templates are looked
up by name in an ordered list of :class:`TemplateSource` objects: a custom
directory (when configured) first, then the default templates shipped in
``renderer/templates/``. A custom directory therefore only needs to contain
the templates it wants to override.

Template names:

* ``skill.md.j2`` -- top-level ``SKILL.md``
* ``resource.md.j2`` -- one resource index
* ``operation.md.j2`` -- one operation page
* ``schema.md.j2`` -- one schema page
* ``schema-index.md.j2`` -- ``_index.md`` of a schema group
* ``authentication.md.j2`` -- ``authentication.md``

Every template sees the node's fields as top-level variables, plus the
globals :func:`~openapi_to_skills.naming.to_file_name`,
:func:`~openapi_to_skills.naming.extract_schema_prefix`, and
:func:`schema_file_path`, and the filters ``enum_value`` and ``one_line``
(flattens text for a table cell).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

import jinja2
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import BaseModel

from openapi_to_skills.exceptions import TemplateError
from openapi_to_skills.models import (
    AuthSchemeDocument,
    OperationDocument,
    ResourceDocument,
    SchemaDocument,
    SchemaGroupDocument,
    SkillDocument,
)
from openapi_to_skills.naming import extract_schema_prefix, to_file_name
from openapi_to_skills.parser.schemas import format_enum_value

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"
"""Path to the bundled Jinja2 templates (``renderer/templates/``)."""

SKILL_TEMPLATE = "skill.md.j2"
RESOURCE_TEMPLATE = "resource.md.j2"
OPERATION_TEMPLATE = "operation.md.j2"
SCHEMA_TEMPLATE = "schema.md.j2"
SCHEMA_INDEX_TEMPLATE = "schema-index.md.j2"
AUTHENTICATION_TEMPLATE = "authentication.md.j2"


@runtime_checkable
class TemplateSource(Protocol):
    """Anything that can answer whether it has a template and render it."""

    def has_template(self, name: str) -> bool: ...

    def render(self, name: str, data: dict[str, Any]) -> str: ...


class JinjaTemplateSource:
    """A :class:`TemplateSource` backed by one directory of Jinja2 templates.

    Args:
        directory: The template directory. Must exist.

    Raises:
        TemplateError: If *directory* is not an existing directory.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise TemplateError(f"Templates directory not found: {self.directory}")
        self._env = _create_jinja_env(self.directory)

    def has_template(self, name: str) -> bool:
        return (self.directory / name).is_file()

    def render(self, name: str, data: dict[str, Any]) -> str:
        try:
            template = self._env.get_template(name)
            return template.render(**data)
        except jinja2.TemplateNotFound as exc:
            raise TemplateError(f"Template not found: {self.directory / name}") from exc
        except jinja2.TemplateError as exc:
            raise TemplateError(f"Failed to render {name}: {exc}") from exc

    def __repr__(self) -> str:
        return f"JinjaTemplateSource({str(self.directory)!r})"


class TemplateRenderer:
    """Render IR nodes to Markdown, preferring custom templates over defaults.

    Args:
        template_dir: Optional directory of custom templates. Any template
            it lacks falls back to *default_dir*.
        default_dir: Directory of the default templates.

    Raises:
        TemplateError: If either directory does not exist.

    Example::

        renderer = TemplateRenderer(template_dir=Path("./my-templates"))
        markdown = renderer.render_skill(doc)
    """

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        default_dir: Path = DEFAULT_TEMPLATES_DIR,
    ) -> None:
        if not Path(default_dir).is_dir():
            raise TemplateError(f"Default templates directory not found: {default_dir}")
        if template_dir is not None and not Path(template_dir).is_dir():
            raise TemplateError(f"Custom templates directory not found: {template_dir}")

        self.sources: list[TemplateSource] = []
        if template_dir is not None:
            self.sources.append(JinjaTemplateSource(Path(template_dir)))
        self.sources.append(JinjaTemplateSource(Path(default_dir)))

    def render(self, name: str, data: dict[str, Any]) -> str:
        """Render *name* with the first source that has it.

        Raises:
            TemplateError: If no source provides the template, or rendering
                fails.
        """
        for source in self.sources:
            if source.has_template(name):
                return source.render(name, data)
        raise TemplateError(f"Template not found in any source: {name}")

    def render_skill(self, doc: SkillDocument) -> str:
        data = _node_context(doc)
        data["total_operations"] = sum(len(r.operations) for r in doc.resources)
        data["total_schemas"] = sum(len(g.schemas) for g in doc.schema_groups)
        return self.render(SKILL_TEMPLATE, data)

    def render_resource(self, doc: ResourceDocument) -> str:
        return self.render(RESOURCE_TEMPLATE, _node_context(doc))

    def render_operation(self, doc: OperationDocument) -> str:
        return self.render(OPERATION_TEMPLATE, _node_context(doc))

    def render_schema(self, doc: SchemaDocument) -> str:
        return self.render(SCHEMA_TEMPLATE, _node_context(doc))

    def render_schema_index(self, group: SchemaGroupDocument) -> str:
        return self.render(SCHEMA_INDEX_TEMPLATE, _node_context(group))

    def render_authentication(self, schemes: list[AuthSchemeDocument]) -> str:
        return self.render(AUTHENTICATION_TEMPLATE, {"schemes": schemes})


def create_renderer(template_dir: Optional[Path] = None) -> TemplateRenderer:
    """Create a renderer over the default templates and an optional override directory."""
    return TemplateRenderer(template_dir=template_dir)


def schema_file_path(ref: str) -> str:
    """Path of a schema page relative to ``references/schemas/``.

    A trailing ``[]`` (array of a component) is ignored.

    Examples::

        >>> schema_file_path("UserProfile")
        'User/UserProfile.md'
        >>> schema_file_path("Pet[]")
        'Pet/Pet.md'
    """
    name = ref[:-2] if ref.endswith("[]") else ref
    return f"{to_file_name(extract_schema_prefix(name))}/{to_file_name(name)}.md"


def _create_jinja_env(directory: Path) -> Environment:
    """Create the Jinja2 environment for one template directory.

    Autoescape is disabled for ``.md.j2`` files (they produce Markdown, not
    HTML). Block trimming and lstrip keep the templates readable.
    """
    env = Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.globals["to_file_name"] = to_file_name
    env.globals["extract_schema_prefix"] = extract_schema_prefix
    env.globals["schema_file_path"] = schema_file_path
    env.filters["enum_value"] = format_enum_value
    env.filters["one_line"] = _one_line
    return env


def _one_line(value: Any) -> str:
    """Flatten text for a Markdown table cell."""
    if not value:
        return ""
    return " ".join(str(value).split()).replace("|", "\\|")


def _node_context(node: BaseModel) -> dict[str, Any]:
    """Expose a node's fields as top-level template variables."""
    return {name: getattr(node, name) for name in type(node).model_fields}


__all__ = [
    "DEFAULT_TEMPLATES_DIR",
    "JinjaTemplateSource",
    "TemplateRenderer",
    "TemplateSource",
    "create_renderer",
    "schema_file_path",
]
