"""Request context collaborator.

A RequestContext supplies the facts a caller knows about the current
request: subject/action/resource/environment attribute values and the
current time. The PEP only needs the subject login id from it
(see PolicyEnforcementPoint.enforce_for_context).

StaticRequestContext is the stand-in used by tests and tools: it reports a
fixed identity and the real current time, and answers every other accessor
with an empty value instead of raising.
"""

from __future__ import annotations

__all__ = [
    "RequestContext",
    "StaticRequestContext",
]

from datetime import datetime, timezone
from typing import Iterator, Protocol, runtime_checkable

from fcrepo_pep.constants import DEFAULT_SUBJECT_LOGIN_ID


@runtime_checkable
class RequestContext(Protocol):
    """Per-request attribute source consumed by the PEP and its callers."""

    @property
    def password(self) -> str: ...

    @property
    def no_op(self) -> bool: ...

    def now(self) -> datetime: ...

    def get_subject_value(self, name: str) -> str: ...

    def get_subject_values(self, name: str) -> list[str]: ...

    def n_subject_values(self, name: str) -> int: ...

    def get_action_value(self, name: str) -> str: ...

    def get_action_values(self, name: str) -> list[str]: ...

    def n_action_values(self, name: str) -> int: ...

    def get_resource_value(self, name: str) -> str: ...

    def get_resource_values(self, name: str) -> list[str]: ...

    def n_resource_values(self, name: str) -> int: ...

    def get_environment_value(self, name: str) -> str: ...

    def get_environment_values(self, name: str) -> list[str]: ...

    def n_environment_values(self, name: str) -> int: ...


class StaticRequestContext:
    """Context with a fixed subject identity and the real clock.

    Only get_subject_value() and now() carry information. Everything else
    returns "", [], 0, {} or False, and setters are accepted and ignored.

    Attributes:
        subject_login_id: Identity returned for every subject attribute.
    """

    def __init__(self, subject_login_id: str = DEFAULT_SUBJECT_LOGIN_ID) -> None:
        self.subject_login_id = subject_login_id

    @property
    def password(self) -> str:
        return ""

    @property
    def no_op(self) -> bool:
        return False

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    # Subject
    def get_subject_value(self, name: str) -> str:
        return self.subject_login_id

    def get_subject_values(self, name: str) -> list[str]:
        return []

    def n_subject_values(self, name: str) -> int:
        return 0

    def subject_attributes(self) -> Iterator[str]:
        return iter(())

    # Action
    def get_action_value(self, name: str) -> str:
        return ""

    def get_action_values(self, name: str) -> list[str]:
        return []

    def n_action_values(self, name: str) -> int:
        return 0

    def action_attributes(self) -> Iterator[str]:
        return iter(())

    def set_action_attributes(self, attributes: dict[str, list[str]]) -> None:
        pass

    # Resource
    def get_resource_value(self, name: str) -> str:
        return ""

    def get_resource_values(self, name: str) -> list[str]:
        return []

    def n_resource_values(self, name: str) -> int:
        return 0

    def resource_attributes(self) -> Iterator[str]:
        return iter(())

    def set_resource_attributes(self, attributes: dict[str, list[str]]) -> None:
        pass

    # Environment
    def get_environment_value(self, name: str) -> str:
        return ""

    def get_environment_values(self, name: str) -> list[str]:
        return []

    def n_environment_values(self, name: str) -> int:
        return 0

    def get_environment_attributes(self) -> dict[str, list[str]]:
        return {}

    def environment_attributes(self) -> Iterator[str]:
        return iter(())

    def __repr__(self) -> str:
        return f"StaticRequestContext(subject_login_id={self.subject_login_id!r})"
