"""
Exception hierarchy for openrpc-diff.

Every failure aborts the whole comparison. Loading errors name the document
path (and which side it was given on); comparison errors name the method,
the parameter position and the document whose schema could not be diffed.
"""

from typing import Optional


class OpenRPCDiffError(Exception):
    """Base class for all errors raised while comparing two documents."""


class DocumentError(OpenRPCDiffError):
    """
    Base exception for errors tied to one input document.

    Attributes:
        path: Path of the offending document
        side: 'left' or 'right' when known
    """

    def __init__(self, message: str, path: str, side: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message)
        self.path = str(path)
        self.side = side
        self.original_error = original_error

    def __str__(self) -> str:
        prefix = f"{self.side} document " if self.side else ""
        base_msg = f"{prefix}{self.path}: {super().__str__()}"
        if self.original_error:
            base_msg += f" (caused by: {self.original_error})"
        return base_msg


class DocumentNotFoundError(DocumentError):
    """The document path does not exist."""


class DocumentReadError(DocumentError):
    """The document exists but could not be read."""


class DocumentParseError(DocumentError):
    """
    The document could not be turned into a specification.

    Attributes:
        location: '/'-separated pointer to the offending node, or
            'line X column Y' for syntax errors
    """

    def __init__(self, message: str, path: str, location: str = "", side: Optional[str] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, path, side=side, original_error=original_error)
        self.location = location

    def __str__(self) -> str:
        text = super().__str__()
        if self.location:
            text += f" (at {self.location})"
        return text


class SchemaFormatError(OpenRPCDiffError):
    """A schema node has the wrong shape; ``pointer`` locates it in the document."""

    def __init__(self, message: str, pointer: str = ""):
        super().__init__(message)
        self.pointer = pointer


class SchemaDiffError(OpenRPCDiffError):
    """
    The structural diff could not run on a pair of schemas.

    Raised for unresolved local references, reference cycles and schema
    values of the wrong shape.

    Attributes:
        side: 'left' or 'right', the schema the problem was found in
        schema_path: dotted path of the node inside the compared schema
    """

    def __init__(self, message: str, side: Optional[str] = None, schema_path: str = ""):
        super().__init__(message)
        self.side = side
        self.schema_path = schema_path

    def __str__(self) -> str:
        text = super().__str__()
        if self.schema_path:
            text += f" at '{self.schema_path}'"
        return text


class MethodComparisonError(OpenRPCDiffError):
    """
    Wraps a SchemaDiffError with the method and descriptor it came from.

    Attributes:
        method: method name
        position: parameter index, or None for the result
        document: path of the document on the failing side, when known
    """

    def __init__(self, method: str, position: Optional[int], cause: SchemaDiffError,
                 document: Optional[str] = None):
        where = "result" if position is None else f"parameter {position}"
        message = f"couldn't compare {where} of method '{method}'"
        if document:
            message += f" ({cause.side} document {document})"
        super().__init__(f"{message}: {cause}")
        self.method = method
        self.position = position
        self.document = document
        self.cause = cause
