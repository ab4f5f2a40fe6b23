from __future__ import annotations


class LoadGenError(Exception):
    """Base class for errors that stop a run before it starts."""


class ConfigError(LoadGenError, ValueError):
    pass


class EncodingError(LoadGenError):
    pass


class IssuerParseError(LoadGenError):
    pass


class EmptyPoolError(LoadGenError):
    pass


class SinkError(LoadGenError):
    pass
