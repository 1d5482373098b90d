"""Policy Enforcement Point (PEP) - Request framing and enforcement.

The PEP never decides anything itself. It frames a request as subject,
action and resource attributes, asks the decision engine, and reduces the
engine's Results to allow or deny:

- Wrappers: ../context/ - build attribute sets
- PDP (Policy Decision Point): ../pdp/ - evaluates requests
- PEP: This module - holds the engine and enforces its decisions

Structure:
    handle.py      - EngineHandle, the swappable engine reference
    enforcement.py - PolicyEnforcementPoint (activate, reload_policy, enforce)

Note: AuthorizationDeniedError and friends are defined in fcrepo_pep.exceptions
"""

from fcrepo_pep.pep.enforcement import PolicyEnforcementPoint, ResourceLike
from fcrepo_pep.pep.handle import EngineHandle, EngineSnapshot

__all__ = [
    # Enforcement
    "PolicyEnforcementPoint",
    "ResourceLike",
    # Engine lifecycle
    "EngineHandle",
    "EngineSnapshot",
]
