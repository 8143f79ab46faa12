"""openapi_to_skills -- Turn OpenAPI 3.0 specs into Agent Skill reference bundles.

This package converts an OpenAPI specification into a directory of Markdown
documents that an agent can browse on demand: a top-level ``SKILL.md``
summary, one index per resource, one page per operation, one page per schema
(grouped by name prefix), and an optional authentication guide.

Typical workflow::

    openapi-to-skills convert openapi.yaml -o ./skills
    openapi-to-skills inspect resources openapi.yaml

Programmatic use::

    from openapi_to_skills import convert_openapi_to_skill, parse_spec
    from openapi_to_skills.models import ConvertOptions

    doc = parse_spec(raw_spec)
    convert_openapi_to_skill(raw_spec, ConvertOptions(output_dir="./skills"))

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for the intermediate representation and options.
    naming: File-name and skill-name normalisation.
    parser: Spec loading and the spec-to-IR transformation.
    renderer: Jinja2 Markdown rendering with template overrides.
    writer: Filesystem and dry-run writers.
    converter: Lays rendered documents out on disk.
    config: Layered configuration (flags, env, project, user).
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics and stdout tables with Rich support.
"""

__version__ = "0.3.0"

from openapi_to_skills.converter import convert_openapi_to_skill  # noqa: E402
from openapi_to_skills.parser.extractor import parse_spec  # noqa: E402

__all__ = ["__version__", "convert_openapi_to_skill", "parse_spec"]
