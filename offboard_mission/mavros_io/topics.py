"""Topic helpers for the MAVROS namespace."""

from __future__ import annotations

from typing import Optional

DEFAULT_MAVROS_NAMESPACE = "mavros"


def namespaced(topic: str, *, namespace: Optional[str] = None) -> str:
    """Return an absolute topic with an optional namespace prefix.

    - Removes leading slashes from ``topic``.
    - If ``namespace`` is provided, prefixes ``<namespace>/`` (namespace cleaned of leading/trailing slashes).
    """

    clean_topic = (topic or "").lstrip("/")
    if not clean_topic:
        return "/"

    if namespace:
        ns = namespace.strip("/")
        if ns:
            clean_topic = f"{ns}/{clean_topic}"

    return f"/{clean_topic}"


def mavros_topic(name: str, namespace: Optional[str] = DEFAULT_MAVROS_NAMESPACE) -> str:
    """``mavros_topic("state")`` -> ``/mavros/state``; services resolve the same way."""

    return namespaced(name, namespace=namespace)


__all__ = ["DEFAULT_MAVROS_NAMESPACE", "namespaced", "mavros_topic"]
