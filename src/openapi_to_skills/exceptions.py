"""Exception hierarchy for openapi_to_skills.

All exceptions inherit from :class:`SkillsError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`openapi_to_skills.exit_codes`. The top-level error handler in
:func:`openapi_to_skills.app.main` catches ``SkillsError`` and exits with the
appropriate code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

The spec-to-IR transformation itself never raises these: it is tolerant of
missing optional fields. They are raised at the boundaries (loading, config,
templates, writing).

Subclass hierarchy::

    SkillsError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SpecParseError      (exit 3)
    +-- TemplateError       (exit 4)
    +-- OutputError         (exit 5)
    +-- ConfigError         (exit 1)
"""

from openapi_to_skills.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_OUTPUT_ERROR,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TEMPLATE_ERROR,
)


class SkillsError(Exception):
    """Base exception for all openapi_to_skills errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`openapi_to_skills.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SkillsError):
    """Raised for invalid CLI arguments or option values."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SkillsError):
    """Raised when the OpenAPI spec cannot be loaded or fails structural checks."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class TemplateError(SkillsError):
    """Raised when a template directory is missing or a template fails to render."""

    exit_code = EXIT_TEMPLATE_ERROR


class OutputError(SkillsError):
    """Raised when the output directory exists without ``--force`` or a write fails."""

    exit_code = EXIT_OUTPUT_ERROR


class ConfigError(SkillsError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
