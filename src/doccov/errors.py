"""Exception hierarchy for doccov."""


class DocCovError(Exception):
    """Base class for all doccov errors."""


class ValidationError(DocCovError, ValueError):
    """Caller-supplied options or configuration are invalid."""


class SourceReferenceError(DocCovError, ValueError):
    """A documentation source reference string cannot be used."""


class InvalidFormatError(SourceReferenceError):
    """The range part of a source reference is malformed."""


class UnsafePathError(SourceReferenceError):
    """The path part of a source reference escapes the project."""


class ScanError(DocCovError):
    """Filesystem traversal failed."""


class DocumentationStoreError(DocCovError):
    """The documentation store cannot be read."""
