"""Exception hierarchy for the query assistant."""

from __future__ import annotations


class QueryAssistantError(Exception):
    """Base exception for the query assistant."""


class UnrecognizedIntent(QueryAssistantError):
    """Reserved: unmatched questions are classified as ``general`` instead."""


class DataUnavailable(QueryAssistantError):
    """The data store could not answer an aggregate query."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        self.operation = operation
        super().__init__(message or f"Data store query '{operation}' failed.")


class InvalidTimeReference(QueryAssistantError, ValueError):
    """The reference timestamp passed to a handler is not a datetime."""


class AnswerUnavailable(QueryAssistantError):
    """The language model could not phrase an answer for the result."""


__all__ = [
    "AnswerUnavailable",
    "DataUnavailable",
    "InvalidTimeReference",
    "QueryAssistantError",
    "UnrecognizedIntent",
]
