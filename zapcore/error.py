"""Encoding of errors, including groups of errors, into log fields."""

from __future__ import annotations

from contextlib import suppress
from typing import Any, Iterable, Sequence


class MultiError(Exception):
    """An error made of several errors."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self._errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        return "; ".join(str(e) for e in self._errors)

    def __format__(self, spec: str) -> str:
        if spec == "+v":
            parts = ["the following errors occurred:"]
            parts.extend(f"\n -  {_verbose_or_str(e)}" for e in self._errors)
            return "".join(parts)
        return super().__format__(spec)

    def errors(self) -> list[BaseException]:
        """Return the errors this error is made of."""
        return list(self._errors)


def _verbose_or_str(err: BaseException) -> str:
    try:
        return format(err, "+v")
    except (TypeError, ValueError):
        return str(err)


def _flatten(err: BaseException | None) -> list[BaseException]:
    if err is None:
        return []
    if isinstance(err, MultiError):
        return err.errors()
    return [err]


def combine_errors(*args: BaseException | None) -> BaseException | None:
    """Combine errors into one, skipping None and flattening MultiErrors."""
    errs = [e for arg in args for e in _flatten(arg)]
    if not errs:
        return None
    if len(errs) == 1:
        return errs[0]
    return MultiError(errs)


def append_errors(left: BaseException | None, right: BaseException | None) -> BaseException | None:
    """Append two errors, either of which may be None."""
    if left is None:
        return right
    if right is None:
        return left
    return combine_errors(left, right)


def _is_error_group(err: Any) -> bool:
    return callable(getattr(err, "errors", None))


def _panic(exc: BaseException) -> RuntimeError:
    return RuntimeError(f"PANIC={exc}")


def encode_error(key: str, err: BaseException | None, enc: Any) -> None:
    """Add err to enc under key.

    A group of errors also gets a "<key>Causes" array; an error whose
    verbose "+v" format differs from its message gets "<key>Verbose".
    Raises RuntimeError("PANIC=...") if the error cannot be rendered.
    """
    if err is None:
        enc.add_string(key, "<nil>")
        return
    try:
        basic = str(err)
    except Exception as exc:
        raise _panic(exc) from exc
    enc.add_string(key, basic)

    if _is_error_group(err):
        try:
            causes = err.errors()
        except Exception as exc:
            raise _panic(exc) from exc
        enc.add_array(key + "Causes", _ErrArray(causes))
        return

    try:
        verbose = format(err, "+v")
    except (TypeError, ValueError):
        return
    except Exception as exc:
        raise _panic(exc) from exc
    if verbose != basic:
        enc.add_string(key + "Verbose", verbose)


class _ErrArray:
    """Encodes a list of errors as an array of {"error": ...} objects."""

    def __init__(self, errs: Sequence[BaseException | None]) -> None:
        self._errs = errs

    def marshal_log_array(self, arr: Any) -> None:
        for err in self._errs:
            if err is None:
                continue
            with suppress(Exception):
                arr.append_object(_ErrArrayElem(err))


class _ErrArrayElem:
    """Encodes a single error as {"error": ...}."""

    def __init__(self, err: BaseException) -> None:
        self._err = err

    def marshal_log_array(self, arr: Any) -> None:
        arr.append_object(self)

    def marshal_log_object(self, enc: Any) -> None:
        encode_error("error", self._err, enc)