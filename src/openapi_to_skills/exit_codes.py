"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~openapi_to_skills.exceptions.SkillsError` subclass.
Scripts wrapping the converter can inspect the exit code to tell a bad spec
from a bad template or an unwritable output directory without parsing stderr.

Example::

    $ openapi-to-skills convert broken.yaml
    $ echo $?
    3   # EXIT_SPEC_PARSE_ERROR -- the spec could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or option values."""

EXIT_SPEC_PARSE_ERROR = 3
"""The OpenAPI specification could not be loaded or failed structural checks."""

EXIT_TEMPLATE_ERROR = 4
"""A template directory was missing or a template failed to render."""

EXIT_OUTPUT_ERROR = 5
"""The output directory already exists or a file could not be written."""
