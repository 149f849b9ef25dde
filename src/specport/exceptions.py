"""Exception hierarchy for specport.

All exceptions inherit from :class:`SpecportError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specport.exit_codes`.
Stage-level errors (:class:`DocumentLoadError`, :class:`RefCycleError`, ...)
are raised inside the pipeline; the public entry points in
:mod:`specport.assembler` catch *everything* once and re-raise a single
:class:`CollectionImportError` that remembers the failing
:class:`ImportStage` and chains the original exception as ``__cause__``.

Subclass hierarchy::

    SpecportError (exit 1)
    +-- DocumentLoadError      (exit 4 when reading, 7 when parsing)
    +-- UnsupportedFormatError (exit 5)
    +-- RefCycleError          (exit 6)
    +-- PipelineError          (exit 6)
    +-- ConfigError            (exit 1)
    +-- CollectionImportError  (exit code of its cause, else 6)
"""

from __future__ import annotations

import enum
from typing import Optional

from specport.exit_codes import (
    EXIT_CONVERSION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_PARSE_ERROR,
    EXIT_READ_ERROR,
    EXIT_UNSUPPORTED_FORMAT,
)


class ImportStage(str, enum.Enum):
    """Pipeline stage in which an import failed."""

    READ = "read"
    PARSE = "parse"
    CONVERT = "convert"
    POSTPROCESS = "postprocess"


class SpecportError(Exception):
    """Base exception for all specport errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specport.exit_codes`. The CLI entry point catches
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


class DocumentLoadError(SpecportError):
    """Raised when a source document cannot be read or is not valid YAML/JSON.

    ``stage`` is :attr:`ImportStage.READ` for I/O failures and
    :attr:`ImportStage.PARSE` for syntax errors; the exit code follows it.
    """

    exit_code = EXIT_READ_ERROR

    def __init__(self, message: str, stage: ImportStage = ImportStage.READ):
        super().__init__(
            message,
            exit_code=EXIT_PARSE_ERROR if stage == ImportStage.PARSE else None,
        )
        self.stage = stage


class UnsupportedFormatError(SpecportError):
    """Raised when a document is neither RAML nor OpenAPI 3.x."""

    exit_code = EXIT_UNSUPPORTED_FORMAT


class RefCycleError(SpecportError):
    """Raised for a ``$ref`` cycle or overly deep ref chain when the cycle policy is ``error``."""

    exit_code = EXIT_CONVERSION_ERROR

    def __init__(self, message: str, ref: str):
        super().__init__(message)
        self.ref = ref


class PipelineError(SpecportError):
    """Raised by a post-processing stage that rejects the assembled collection."""

    exit_code = EXIT_CONVERSION_ERROR


class ConfigError(SpecportError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class CollectionImportError(SpecportError):
    """The single error type surfaced by :func:`~specport.assembler.import_collection`.

    The whole import fails on the first error, whatever stage raised it. The
    message stays short and human-readable; richer diagnostics are available
    through :attr:`stage` and :attr:`cause` (also chained as ``__cause__``).

    Args:
        message: Short message, prefixed ``"Import collection failed"`` or
            ``"An error occurred while parsing the ... collection"``.
        stage: The stage that failed.
        cause: The original exception, if any.
    """

    exit_code = EXIT_CONVERSION_ERROR

    def __init__(
        self,
        message: str,
        stage: ImportStage,
        cause: Optional[BaseException] = None,
    ):
        exit_code = cause.exit_code if isinstance(cause, SpecportError) else None
        super().__init__(message, exit_code=exit_code)
        self.stage = stage
        self.cause = cause
