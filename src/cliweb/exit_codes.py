"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~cliweb.exceptions.CliwebError` subclass.
Shell wrappers can inspect the exit code of ``cliweb render`` or
``cliweb serve`` to tell a bad definition from a bad flag without parsing
stderr.

Example::

    $ cliweb render broken.yaml
    $ echo $?
    7   # EXIT_DEFINITION_ERROR -- the command tree could not be built
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""A flag was unknown or its value could not be parsed."""

EXIT_NOT_FOUND = 4
"""A command path segment did not match any command."""

EXIT_EXECUTION_ERROR = 5
"""A command's runner reported a failure."""

EXIT_DEFINITION_ERROR = 7
"""The command tree definition could not be loaded or built."""

EXIT_UPLOAD_ERROR = 8
"""An uploaded file could not be stored."""
