"""Exception hierarchy shared by the loading and viewport layers."""

from __future__ import annotations


class FastTraceError(Exception): ...
class IngestionError(FastTraceError): ...
class EmptyInputError(IngestionError): ...
class MissingTimeColumnError(IngestionError): ...
class InvalidTimeRangeError(FastTraceError, ValueError): ...


__all__ = [
    "EmptyInputError",
    "FastTraceError",
    "IngestionError",
    "InvalidTimeRangeError",
    "MissingTimeColumnError",
]
