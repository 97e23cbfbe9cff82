"""Numeric process exit codes.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~netage.exceptions.NetageError` subclass.
Build scripts can inspect the exit code to tell an argument mistake apart
from a failed build without parsing stderr.

Example::

    $ netage build --no-such-flag
    $ echo $?
    127   # EXIT_INVALID_USAGE -- the arguments could not be parsed
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including failed builds."""

EXIT_PLUGIN_ERROR = 10
"""A plugin could not be resolved or loaded."""

EXIT_INVALID_USAGE = 127
"""The command line could not be parsed."""
