"""Exception hierarchy for Data Alchemist Tools.

Validation findings are never raised: they are the engine's normal output.
Exceptions are reserved for malformed requests and configuration problems.
"""

from __future__ import annotations


class DataAlchemistError(Exception):
    """Base class for all package errors."""


class RequestError(DataAlchemistError, ValueError):
    """A request is malformed and was rejected before any data was touched."""


class SessionNotFoundError(DataAlchemistError, KeyError):
    """No session exists for the given identifier."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else "Session not found"


class ClassifierConfigError(DataAlchemistError, LookupError):
    """A finding category has no remediation tier configured."""


__all__ = [
    "DataAlchemistError",
    "RequestError",
    "SessionNotFoundError",
    "ClassifierConfigError",
]
