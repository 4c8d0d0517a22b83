from __future__ import annotations


class SmplInfoError(Exception):
    """Base class for every failure raised while reading or editing samples."""

    kind = "Error"


class NotAContainer(SmplInfoError):
    """The stream does not start with a RIFF/WAVE header."""

    kind = "NotAContainer"


class Truncated(SmplInfoError):
    """A chunk walk ran off the end of the stream."""

    kind = "Truncated"


class Malformed(SmplInfoError):
    """A chunk declares a length that does not fit inside its container."""

    kind = "Malformed"


class InvalidRecord(SmplInfoError):
    kind = "InvalidRecord"


class InvalidNote(SmplInfoError, ValueError):
    kind = "InvalidNote"


class InvalidFormat(SmplInfoError, ValueError):
    kind = "InvalidFormat"


def error_kind(exc: BaseException) -> str:
    if isinstance(exc, SmplInfoError):
        return exc.kind
    if isinstance(exc, OSError):
        return "Io"
    return type(exc).__name__
