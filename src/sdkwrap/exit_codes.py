"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sdkwrap.exceptions.SdkwrapError` subclass.
Build scripts can inspect the exit code to tell a bad manifest apart from a
partially successful generation run without parsing stderr.

Example::

    $ sdkwrap generate netbox.yaml --strict -o NetBox.psm1
    $ echo $?
    8   # EXIT_PARTIAL_FAILURE -- some endpoints were skipped
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_MANIFEST_ERROR = 7
"""The metadata manifest could not be loaded, parsed, or validated."""

EXIT_PARTIAL_FAILURE = 8
"""One or more endpoints or types could not be generated (``--strict`` only)."""

EXIT_OUTPUT_ERROR = 9
"""Generated source text could not be written to its destination."""
