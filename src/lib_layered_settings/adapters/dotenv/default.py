"""`.env` adapter for developer-only overrides.

Purpose
-------
Implement :class:`lib_layered_settings.application.ports.DotEnvLoader` by
scanning upwards from a start directory for a ``.env`` file. The startup
routine consults it when the environment-name variable is not set in the
process, so a developer can pin ``APP_ENVIRONMENT=Development`` locally without
touching shell profiles.

Contents
--------
* :class:`DefaultDotEnvLoader` – upward search plus optional extra candidates.
* :func:`parse_dotenv` – strict ``KEY=VALUE`` parser.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ...domain.errors import InvalidFormat
from ...observability import log_debug, log_error

DOTENV_FILENAME = ".env"


class DefaultDotEnvLoader:
    """Load the nearest dotenv file into a flat ``{name: value}`` mapping.

    Why
    ----
    Developers pin the active environment locally without editing shell
    profiles, while deployed processes keep using the real variable.
    """

    def __init__(self, *, extras: Iterable[str] | None = None) -> None:
        """Initialise the loader with optional fallback *extras*.

        Parameters
        ----------
        extras:
            Additional file paths tried after the upward search finds nothing.
        """

        self._extras = [Path(p) for p in extras or []]
        self.last_loaded_path: str | None = None

    def load(self, start_dir: str | None = None) -> dict[str, str]:
        """Return the first parsed dotenv file discovered in the search order.

        Parameters
        ----------
        start_dir:
            Directory seeding the upward search (defaults to the working
            directory).

        Returns
        -------
        dict[str, str]
            Variable names mapped to unquoted values; empty when no file exists.

        Side Effects
        ------------
        Sets :attr:`last_loaded_path` and emits ``dotenv_loaded`` or
        ``dotenv_not_found``.

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> _ = (Path(tmp.name) / '.env').write_text('APP_ENVIRONMENT=Development', encoding='utf-8')
        >>> nested = Path(tmp.name) / 'src' / 'web'
        >>> nested.mkdir(parents=True)
        >>> loader = DefaultDotEnvLoader()
        >>> loader.load(str(nested))['APP_ENVIRONMENT']
        'Development'
        >>> loader.last_loaded_path == str(Path(tmp.name) / '.env')
        True
        >>> tmp.cleanup()
        """

        self.last_loaded_path = None
        for candidate in [*_iter_candidates(start_dir), *self._extras]:
            if candidate.is_file():
                self.last_loaded_path = str(candidate)
                data = parse_dotenv(candidate)
                log_debug("dotenv_loaded", source="dotenv", kind="dotenv", path=self.last_loaded_path, keys=len(data))
                return data
        log_debug("dotenv_not_found", source="dotenv", kind="dotenv", path=None)
        return {}


def _iter_candidates(start_dir: str | None) -> Iterable[Path]:
    """Yield ``.env`` candidates from *start_dir* up to the filesystem root.

    >>> next(_iter_candidates(".")).name
    '.env'
    """

    base = Path(start_dir) if start_dir else Path.cwd()
    for directory in [base, *base.parents]:
        yield directory / DOTENV_FILENAME


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse ``path`` into a flat dictionary, raising ``InvalidFormat`` on malformed lines.

    Why
    ----
    A typo in ``.env`` must fail loudly instead of silently selecting the
    production environment.

    What
    ----
    Blank lines, ``#`` comments and a leading ``export`` keyword are accepted.
    Every other line needs a ``KEY=VALUE`` assignment; the error carries the
    1-based line number.
    """

    result: dict[str, str] = {}
    with path.open("r", encoding="utf-8") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export ") :].lstrip()
            if "=" not in line:
                log_error("dotenv_invalid_line", source="dotenv", kind="dotenv", path=str(path), line=line_number)
                raise InvalidFormat(f"Malformed line {line_number} in {path}", line=line_number)
            key, value = line.split("=", 1)
            result[key.strip()] = _strip_quotes(value.strip())
    return result


def _strip_quotes(value: str) -> str:
    """Trim surrounding quotes and inline comments from ``value``.

    Examples
    --------
    >>> _strip_quotes('"Staging"')
    'Staging'
    >>> _strip_quotes("Development # local only")
    'Development'
    """

    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    if value.startswith("#"):
        return ""
    if " #" in value:
        return value.split(" #", 1)[0].strip()
    return value
