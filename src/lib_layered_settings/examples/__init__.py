"""Example generation and demo consumer utilities for ``lib_layered_settings``."""

from .demo_app import (
    AppSecrets,
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    HealthCheck,
    HomePage,
    build_auth,
    build_database_settings,
    build_health_check,
    build_home_page,
)
from .generate import DEFAULT_ENVIRONMENTS, ExampleSpec, generate_examples

__all__ = [
    "AppSecrets",
    "AppSettings",
    "AuthSettings",
    "DatabaseSettings",
    "DEFAULT_ENVIRONMENTS",
    "ExampleSpec",
    "HealthCheck",
    "HomePage",
    "build_auth",
    "build_database_settings",
    "build_health_check",
    "build_home_page",
    "generate_examples",
]
