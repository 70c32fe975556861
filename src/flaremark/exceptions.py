#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the flaremark library.

Recoverable problems (malformed containment, missing references) are not
exceptions; they are reported as diagnostics next to the converted output.
The classes below cover the cases that abort a single document: invalid
configuration, unreadable or unparsable input, fragment inclusion cycles and
the ``abort`` fallback policies.

Exception Hierarchy
-------------------
- FlaremarkError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class or value)
    - StrictValidationError (warnings under strict validation)

  - FileError (file access and I/O)
    - FileNotFoundError (file doesn't exist)
    - FileAccessError (permissions, decoding failures)

  - ParsingError (unparsable topic, fragment or variable set)

  - ReferenceResolutionError (missing references with the abort policy)
    - MissingVariableError
    - MissingFragmentError

  - FragmentCycleError (fragment that includes itself)

  - RenderingError (output generation failures)

"""

from typing import Any, Sequence


class FlaremarkError(Exception):
    """Base exception class for all flaremark-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(FlaremarkError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an options record is of the wrong type or holds a bad value.

    Parameters
    ----------
    message : str
        Description of the problem
    parameter_name : str, optional
        Name of the offending option field
    parameter_value : any, optional
        The rejected value

    """

    def __init__(self, message: str, parameter_name: str | None = None, parameter_value: Any = None):
        """Initialize the invalid options error."""
        super().__init__(message, parameter_name=parameter_name, parameter_value=parameter_value)


class StrictValidationError(ValidationError):
    """Raised after a conversion when strict validation finds warnings.

    Parameters
    ----------
    diagnostics : sequence of Diagnostic
        The warning-level diagnostics collected for the document
    path : str, optional
        Source path of the document

    """

    def __init__(self, diagnostics: Sequence[Any], path: str | None = None):
        """Initialize with the offending diagnostics."""
        count = len(diagnostics)
        where = f" in {path}" if path else ""
        first = f": {diagnostics[0].message}" if diagnostics else ""
        super().__init__(f"{count} warning(s) under strict validation{where}{first}", parameter_name="strictness")
        self.diagnostics = list(diagnostics)
        self.path = path


class FileError(FlaremarkError):
    """Base exception for file access and I/O errors.

    Parameters
    ----------
    message : str
        Description of the file error
    file_path : str, optional
        Path to the problematic file
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, file_path: str | None = None, original_error: Exception | None = None):
        """Initialize the file error with path and message."""
        super().__init__(message, original_error=original_error)
        self.file_path = file_path


class FileNotFoundError(FileError):
    """Exception raised when a file cannot be found."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file not found error."""
        if message is None:
            message = f"File not found: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class FileAccessError(FileError):
    """Exception raised when a file exists but cannot be read."""

    def __init__(self, file_path: str, message: str | None = None, original_error: Exception | None = None):
        """Initialize the file access error."""
        if message is None:
            message = f"Cannot access file: {file_path}"
        super().__init__(message, file_path=file_path, original_error=original_error)


class ParsingError(FlaremarkError):
    """Exception raised when a topic, fragment or variable set cannot be parsed.

    Parameters
    ----------
    message : str
        Description of the parsing failure
    parsing_stage : str, optional
        The stage of parsing where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the parsing failure

    """

    def __init__(self, message: str, parsing_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the parsing error."""
        super().__init__(message, original_error)
        self.parsing_stage = parsing_stage


class ReferenceResolutionError(FlaremarkError):
    """Base class for references that could not be resolved under the abort policy.

    Parameters
    ----------
    message : str
        Description of the failure
    reference : str
        The variable name or fragment path that failed
    location : str, optional
        Human readable location hint

    """

    def __init__(self, message: str, reference: str, location: str | None = None):
        """Initialize the reference error."""
        if location:
            message = f"{message} ({location})"
        super().__init__(message)
        self.reference = reference
        self.location = location


class MissingVariableError(ReferenceResolutionError):
    """Raised for an unknown variable when the missing-variable policy is ``abort``.

    Parameters
    ----------
    name : str
        The unresolved ``Namespace.Name``
    location : str, optional
        Human readable location hint
    suggestions : sequence of str, optional
        Defined variables with a similar name

    """

    def __init__(self, name: str, location: str | None = None, suggestions: Sequence[str] = ()):
        """Initialize with the variable name."""
        message = f"Variable not found: {name}"
        if suggestions:
            message += f"; did you mean {', '.join(suggestions)}?"
        super().__init__(message, reference=name, location=location)
        self.suggestions = list(suggestions)


class MissingFragmentError(ReferenceResolutionError):
    """Raised for an unknown fragment when the missing-fragment policy is ``abort``."""

    def __init__(self, path: str, location: str | None = None):
        """Initialize with the fragment path."""
        super().__init__(f"Fragment not found: {path}", reference=path, location=location)


class FragmentCycleError(FlaremarkError):
    """Raised when a fragment includes itself directly or transitively.

    Parameters
    ----------
    chain : sequence of str
        Inclusion chain, starting at the including document and ending with
        the path that closes the cycle

    Examples
    --------
    >>> str(FragmentCycleError(["topic.htm", "a.flsnp", "b.flsnp", "a.flsnp"]))
    'Fragment inclusion cycle: topic.htm -> a.flsnp -> b.flsnp -> a.flsnp'

    """

    def __init__(self, chain: Sequence[str]):
        """Initialize with the inclusion chain."""
        self.chain = list(chain)
        super().__init__("Fragment inclusion cycle: " + " -> ".join(self.chain))


class RenderingError(FlaremarkError):
    """Exception raised when output rendering fails.

    Parameters
    ----------
    message : str
        Description of the rendering failure
    rendering_stage : str, optional
        The stage of rendering where the error occurred
    original_error : Exception, optional
        The underlying exception that caused the rendering failure

    """

    def __init__(self, message: str, rendering_stage: str | None = None, original_error: Exception | None = None):
        """Initialize the rendering error."""
        super().__init__(message, original_error)
        self.rendering_stage = rendering_stage


__all__ = [
    "FlaremarkError",
    "ValidationError",
    "InvalidOptionsError",
    "StrictValidationError",
    "FileError",
    "FileNotFoundError",
    "FileAccessError",
    "ParsingError",
    "ReferenceResolutionError",
    "MissingVariableError",
    "MissingFragmentError",
    "FragmentCycleError",
    "RenderingError",
]
