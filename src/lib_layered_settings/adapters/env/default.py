"""Environment variable adapter.

Purpose
-------
Translate process environment variables into flat configuration keys. It
implements :class:`lib_layered_settings.application.ports.EnvLoader` and is
normally declared after the file sources so deployments can override any file
value without editing files.

Key behaviours
--------------
* An optional prefix limits which variables are captured; it is stripped from
  the resulting keys (``MYAPP_Db__Name`` -> ``Db:Name`` with prefix ``MYAPP_``).
* ``__`` and ``:`` both separate key segments (``Db__Name`` / ``Db:Name``).
* Values stay strings; the typed binder performs conversion.
* Variables are visited in sorted order so names differing only by case
  resolve deterministically (the later name wins).
"""

from __future__ import annotations

import os
from typing import Mapping

from ...observability import log_debug

ENV_SEGMENT_SEPARATOR = "__"


class DefaultEnvLoader:
    """Load environment variables that belong to the configuration namespace.

    Why
    ----
    Deployments override any file value through the process environment
    without editing files; a prefix keeps unrelated variables out.
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability."""

        self._environ = os.environ if environ is None else environ

    def load(self, prefix: str = "", delimiter: str = ":") -> dict[str, object]:
        """Return a flat mapping of variables carrying *prefix*.

        What
            Strips the prefix, maps ``__`` and ``:`` onto *delimiter* and keeps
            values as strings.
        Inputs
            prefix: Case-insensitive name prefix; empty captures every variable.
            delimiter: Key segment separator of the target space.

        Examples
        --------
        >>> env = {
        ...     'PATHOS_Db__Name': 'app_test',
        ...     'PATHOS_Feature:A': 'false',
        ...     'HOME': '/root',
        ... }
        >>> DefaultEnvLoader(environ=env).load('PATHOS_')
        {'Db:Name': 'app_test', 'Feature:A': 'false'}
        """

        collected: dict[str, object] = {}
        folded_prefix = prefix.casefold()
        for name, value in sorted(self._environ.items()):
            if prefix and not name.casefold().startswith(folded_prefix):
                continue
            key = env_name_to_key(name[len(prefix) :], delimiter)
            if not key:
                continue
            for existing in [k for k in collected if k.casefold() == key.casefold()]:
                del collected[existing]
            collected[key] = value
        log_debug("env_variables_loaded", source="environment", kind="environment", path=None, keys=len(collected))
        return collected


def env_name_to_key(name: str, delimiter: str = ":") -> str:
    """Map an environment variable name onto a delimited configuration key.

    Empty segments are dropped so ``__Db____Name`` still yields ``Db:Name``.

    Examples
    --------
    >>> env_name_to_key('AppSettings__Environment')
    'AppSettings:Environment'
    >>> env_name_to_key('Auth0:Domain', '.')
    'Auth0.Domain'
    """

    segments: list[str] = []
    for chunk in name.split(ENV_SEGMENT_SEPARATOR):
        segments.extend(part for part in chunk.split(":") if part)
    return delimiter.join(segments)
