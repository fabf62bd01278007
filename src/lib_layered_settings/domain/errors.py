"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the resolver, and the
typed binder. The hierarchy lives in the domain layer so outer layers may
depend on it without creating import cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all configuration issues.
* :class:`NotFound` – an adapter could not locate its resource.
* :class:`InvalidFormat` – an adapter found its resource but could not parse it.
* :class:`SourceUnavailable` – a *required* source was absent at resolve time.
* :class:`SourceMalformed` – a present source could not be parsed.
* :class:`BindingTypeMismatch` – a resolved value could not convert to a field.

System Role
-----------
Adapters raise :class:`NotFound` and :class:`InvalidFormat`. The composition
root in :mod:`lib_layered_settings.core` translates them into
:class:`SourceUnavailable` / :class:`SourceMalformed` with the source name
attached. The binder raises :class:`BindingTypeMismatch` to its immediate
caller. Callers catch :class:`ConfigError` to handle every failure uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_layered_settings``."""


class NotFound(ConfigError):
    """Represents a missing resource (file, secret store location).

    Why
    ----
    Adapters signal absence without deciding whether it is fatal. The resolver
    consults the source's ``optional`` flag to skip or escalate.
    """


class InvalidFormat(ConfigError):
    """Raised when an input artifact cannot be parsed into structured data.

    Attributes
    ----------
    line / column:
        Parse position reported by the underlying parser, when available.
    """

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.column = column


class SourceUnavailable(ConfigError):
    """A required configuration source could not be located.

    Resolution aborts; a process with missing required configuration must not
    serve requests.

    Examples
    --------
    >>> str(SourceUnavailable("secrets"))
    "Required configuration source 'secrets' is unavailable"
    """

    def __init__(self, source: str, detail: str | None = None) -> None:
        message = f"Required configuration source {source!r} is unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.source = source


class SourceMalformed(ConfigError):
    """A present configuration source could not be parsed.

    Raised regardless of the source's optional flag: optional governs absence,
    not corruption.

    Examples
    --------
    >>> err = SourceMalformed("base", "Expecting value", line=3, column=7)
    >>> str(err)
    "Configuration source 'base' is malformed at line 3, column 7: Expecting value"
    >>> err.position
    (3, 7)
    """

    def __init__(self, source: str, detail: str, *, line: int | None = None, column: int | None = None) -> None:
        location = ""
        if line is not None:
            location = f" at line {line}" + (f", column {column}" if column is not None else "")
        super().__init__(f"Configuration source {source!r} is malformed{location}: {detail}")
        self.source = source
        self.line = line
        self.column = column

    @property
    def position(self) -> tuple[int, int | None] | None:
        """Return ``(line, column)`` when the parser reported a position."""

        if self.line is None:
            return None
        return (self.line, self.column)


class BindingTypeMismatch(ConfigError):
    """A resolved value could not be converted to the target field type.

    The raw value is deliberately absent from the message because it may
    originate from the secret store.

    Examples
    --------
    >>> str(BindingTypeMismatch("Port", "int"))
    "Cannot bind configuration key 'Port' to type int"
    """

    def __init__(self, key: str, expected: str) -> None:
        super().__init__(f"Cannot bind configuration key {key!r} to type {expected}")
        self.key = key
        self.expected = expected
