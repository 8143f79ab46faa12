"""OpenAPI spec parser -- load a spec and transform it into the skill IR.

This sub-package is the core of openapi_to_skills: turning a raw OpenAPI 3.0
document (JSON or YAML, local file or remote URL) into a
:class:`~openapi_to_skills.models.SkillDocument` that any renderer can
consume.

Typical usage::

    from openapi_to_skills.parser import load_spec, parse_spec, validate_spec

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    validate_spec(raw)
    doc = parse_spec(raw)

Sub-modules:

* :mod:`~openapi_to_skills.parser.loader` -- I/O layer (URL, file, stdin)
  plus format detection and structural validation.
* :mod:`~openapi_to_skills.parser.refs` -- ``$ref`` detection and schema
  shape classification.
* :mod:`~openapi_to_skills.parser.schemas` -- Schema and field resolution,
  schema grouping.
* :mod:`~openapi_to_skills.parser.resources` -- Operation filtering,
  grouping, and mapping.
* :mod:`~openapi_to_skills.parser.extractor` -- Assembles the full
  :class:`~openapi_to_skills.models.SkillDocument`.
"""

from openapi_to_skills.parser.extractor import parse_spec
from openapi_to_skills.parser.loader import load_spec, validate_spec

__all__ = ["load_spec", "validate_spec", "parse_spec"]
