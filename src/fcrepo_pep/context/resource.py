"""Resource references accepted by the enforcement point."""

from __future__ import annotations

__all__ = ["ResourceRef"]

from typing import NamedTuple


class ResourceRef(NamedTuple):
    """Target of an action: an object identifier and its namespace.

    An empty resource_id means "unscoped" (e.g. repository-wide actions).
    Plain (resource_id, namespace) tuples are accepted wherever a
    ResourceRef is.
    """

    resource_id: str
    namespace: str = ""

    @classmethod
    def from_pid(cls, pid: str) -> "ResourceRef":
        """Build a reference from a pid, deriving the namespace from its prefix.

        Example:
            >>> ResourceRef.from_pid("demo:42")
            ResourceRef(resource_id='demo:42', namespace='demo')
        """
        namespace, sep, _ = pid.partition(":")
        return cls(resource_id=pid, namespace=namespace if sep else "")
