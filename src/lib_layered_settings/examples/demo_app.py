"""Demo consumer wiring bound settings into plain constructors.

Purpose
-------
Show how an application consumes the resolved space without a global
configuration object or a DI container: one factory per collaborator calls
:func:`~lib_layered_settings.application.binding.bind` and passes the result
to an ordinary constructor.

Shapes
------
* :class:`AppSettings` – the ``AppSettings`` section.
* :class:`AppSecrets` – whole-space binding with an explicit field map.
* :class:`AuthSettings` – the ``Auth0`` section; exposes the token authority.
* :class:`DatabaseSettings` – whole-space binding of the connection string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from ..application.binding import bind
from ..domain.space import UnifiedConfigSpace

APP_SECRETS_FIELD_MAP = {"sample_password": "SamplePassword"}
DATABASE_FIELD_MAP = {"connection_string": "PathosConnectionString"}
HEALTH_SCOPE = "check:health"


@dataclass(frozen=True)
class AppSettings:
    environment: str = ""


@dataclass(frozen=True)
class AppSecrets:
    sample_password: str = field(default="", repr=False)


@dataclass(frozen=True)
class AuthSettings:
    domain: str = ""
    identifier: str = ""

    @property
    def authority(self) -> str:
        """Issuer URL expected on bearer tokens.

        >>> AuthSettings(domain="pathos.eu.auth0.com").authority
        'https://pathos.eu.auth0.com/'
        """

        return f"https://{self.domain}/"


@dataclass(frozen=True)
class DatabaseSettings:
    connection_string: str = "DataSource=Pathos.db"


class HomePage:
    """Landing page controller receiving its settings by constructor."""

    def __init__(self, settings: AppSettings, secrets: AppSecrets) -> None:
        self._settings = settings
        self._secrets = secrets

    def about(self) -> str:
        state = "configured" if self._secrets.sample_password else "missing"
        return f"The sample password for the {self._settings.environment} environment is {state}."


class HealthCheck:
    """Health endpoint guarded by a scope issued by the configured authority."""

    def __init__(self, auth: AuthSettings) -> None:
        self._auth = auth

    def check(self, *, issuer: str, scopes: Iterable[str]) -> str:
        if issuer != self._auth.authority or HEALTH_SCOPE not in set(scopes):
            raise PermissionError(f"Token lacks scope {HEALTH_SCOPE!r} from {self._auth.authority}")
        return "healthy"


def build_home_page(space: UnifiedConfigSpace) -> HomePage:
    settings = bind(space, AppSettings, "AppSettings")
    secrets = bind(space, AppSecrets, field_map=APP_SECRETS_FIELD_MAP)
    return HomePage(settings, secrets)


def build_auth(space: UnifiedConfigSpace) -> AuthSettings:
    return bind(space, AuthSettings, "Auth0")


def build_health_check(space: UnifiedConfigSpace) -> HealthCheck:
    return HealthCheck(build_auth(space))


def build_database_settings(space: UnifiedConfigSpace) -> DatabaseSettings:
    return bind(space, DatabaseSettings, field_map=DATABASE_FIELD_MAP)
