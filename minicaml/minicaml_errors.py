"""Errors raised by the MiniCAML core."""

from typing import Optional

from minicaml_types import MonoType


class MiniCamlError(Exception):
    """ Base class for all MiniCAML errors"""
    pass


class TypeCheckError(MiniCamlError):
    """ Raised when an expression is ill-typed or mentions an unbound variable"""

    def __init__(self, message: str, expected: Optional[MonoType] = None,
                 found: Optional[MonoType] = None):
        super().__init__(message)
        self.expected = expected
        self.found = found


class Stuck(MiniCamlError):
    """ Raised when evaluation reaches a term with no applicable reduction rule"""


class NotFound(MiniCamlError, LookupError):
    """ Raised when a name has no binding in a typing context"""


def type_mismatch(expected: MonoType, found: MonoType) -> TypeCheckError:
    """Build the error for a type that differs from the one required."""
    return TypeCheckError(f"Expected type {expected}\nFound type {found}",
                          expected=expected, found=found)
