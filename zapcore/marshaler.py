"""Interfaces that let user types add themselves to a logging context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class ObjectMarshaler(Protocol):
    """A type that can add itself to an object encoder.

    Failures are reported by raising an exception.
    """

    def marshal_log_object(self, enc: Any) -> None:
        """Add this value's fields to enc."""


@runtime_checkable
class ArrayMarshaler(Protocol):
    """A type that can append itself to an array encoder.

    Failures are reported by raising an exception.
    """

    def marshal_log_array(self, enc: Any) -> None:
        """Append this value's elements to enc."""


@dataclass(frozen=True)
class ObjectMarshalerFunc(ObjectMarshaler):
    """Turns a function into an ObjectMarshaler."""

    func: Callable[[Any], object]

    def marshal_log_object(self, enc: Any) -> None:
        """Call the wrapped function with enc."""
        self.func(enc)


@dataclass(frozen=True)
class ArrayMarshalerFunc(ArrayMarshaler):
    """Turns a function into an ArrayMarshaler."""

    func: Callable[[Any], object]

    def marshal_log_array(self, enc: Any) -> None:
        """Call the wrapped function with enc."""
        self.func(enc)