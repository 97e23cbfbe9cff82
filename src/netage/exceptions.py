"""Exception hierarchy for netage.

All exceptions inherit from :class:`NetageError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`netage.exit_codes`.
The top-level error handler in :func:`netage.app.main` catches
``NetageError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    NetageError (exit 1)
    +-- ConfigError         (exit 1)
    +-- DocumentError       (exit 1)
    +-- BuildError          (exit 1)
    +-- PluginError         (exit 10)
"""

from netage.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_PLUGIN_ERROR,
)


class NetageError(Exception):
    """Base exception for all netage errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`netage.exit_codes`. The entry point catches
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


class ConfigError(NetageError):
    """Raised for configuration problems (missing profiles, invalid JSON or YAML)."""

    exit_code = EXIT_GENERIC_FAILURE


class DocumentError(NetageError):
    """Raised when a source document cannot be read or fetched."""

    exit_code = EXIT_GENERIC_FAILURE


class BuildError(NetageError):
    """Raised when a profile cannot be resolved or its modules fail to compile."""

    exit_code = EXIT_GENERIC_FAILURE


class PluginError(NetageError):
    """Raised when a plugin cannot be resolved, loaded, or is registered twice."""

    exit_code = EXIT_PLUGIN_ERROR
