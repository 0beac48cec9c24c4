from __future__ import annotations


class IngestError(Exception):
    """Base class for file-level failures; row-level problems never raise."""


class SchemaError(IngestError):
    pass


class ParseError(IngestError):
    pass


class LookupParseError(IngestError):
    pass
