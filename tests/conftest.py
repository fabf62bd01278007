"""Test-runner configuration.

Hypothesis builds its unicode character cache on first use in a fresh tree,
which can trip the ``too_slow`` input-generation health check.
"""

from hypothesis import HealthCheck, settings

settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
