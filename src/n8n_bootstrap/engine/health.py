"""Health probe result classification."""

from __future__ import annotations

_HEALTHY_MARKERS = ("healthy", "ready")


def is_healthy(result: object) -> bool:
    """Classify a probe result; only strings mentioning health, readiness or ``200`` pass."""
    if not isinstance(result, str):
        return False
    lowered = result.lower()
    return any(marker in lowered for marker in _HEALTHY_MARKERS) or "200" in result
