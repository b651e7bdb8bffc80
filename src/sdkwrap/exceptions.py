"""Exception hierarchy for sdkwrap.

All exceptions inherit from :class:`SdkwrapError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sdkwrap.exit_codes`.
The top-level error handler in :func:`sdkwrap.app.main` catches
``SdkwrapError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

:class:`GenerationError` and its subclasses are different: they describe a
single endpoint or type that could not be generated. The emission driver
catches them, records a :class:`~sdkwrap.models.GenerationFailure`, and
keeps going with the rest of the run.

Subclass hierarchy::

    SdkwrapError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- ManifestError              (exit 7)
    +-- GenerationError            (exit 8)
    |   +-- UnrecognizedVerbError
    |   +-- UnresolvableTypeError
    |   +-- IntrospectionError
    |   +-- ConstructionPathError
    +-- OutputError                (exit 9)
    +-- ConfigError                (exit 1)
"""

from sdkwrap.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MANIFEST_ERROR,
    EXIT_OUTPUT_ERROR,
    EXIT_PARTIAL_FAILURE,
)


class SdkwrapError(Exception):
    """Base exception for all sdkwrap errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`sdkwrap.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SdkwrapError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ManifestError(SdkwrapError):
    """Raised when a metadata manifest cannot be loaded, parsed, or validated."""

    exit_code = EXIT_MANIFEST_ERROR


class GenerationError(SdkwrapError):
    """Base class for failures scoped to one endpoint or one nested type.

    ``category`` is a short stable label used in failure reports.
    """

    exit_code = EXIT_PARTIAL_FAILURE
    category: str = "generation"


class UnrecognizedVerbError(GenerationError):
    """Raised when a method name starts with none of the recognised verb prefixes.

    Discovery filters such methods out, so reaching the naming resolver
    with one is a contract violation.
    """

    category = "unrecognized-verb"


class UnresolvableTypeError(GenerationError):
    """Raised when a type has no fully qualified name (e.g. an anonymous type)."""

    category = "unresolvable-type"


class IntrospectionError(GenerationError):
    """Raised when a referenced complex type has no definition in the metadata."""

    category = "introspection"


class ConstructionPathError(GenerationError):
    """Raised when a type has neither a parameterless constructor nor a static factory."""

    category = "construction-path"


class OutputError(SdkwrapError):
    """Raised when generated source cannot be written to its destination."""

    exit_code = EXIT_OUTPUT_ERROR


class ConfigError(SdkwrapError):
    """Raised for configuration problems (invalid JSON, unknown keys or targets)."""

    exit_code = EXIT_GENERIC_FAILURE
