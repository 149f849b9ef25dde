"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specport.exceptions.SpecportError` subclass.
Shell wrappers can inspect the exit code of ``specport convert`` to tell a
missing file apart from a document that could not be converted.

Example::

    $ specport convert api.raml -o collection.json
    $ echo $?
    7   # EXIT_PARSE_ERROR -- the file is not valid YAML
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_READ_ERROR = 4
"""The source document could not be read (missing file, bad extension, HTTP error)."""

EXIT_UNSUPPORTED_FORMAT = 5
"""The document is neither RAML nor OpenAPI 3.x."""

EXIT_CONVERSION_ERROR = 6
"""A format adapter or a post-processing stage failed on the document."""

EXIT_PARSE_ERROR = 7
"""The source document is not valid YAML/JSON."""
