"""fcrepo-pep: Policy Enforcement Point for a Fedora-style digital object repository.

Usage:
    from fcrepo_pep import EngineConfig, PolicyEnforcementPoint

    pep = PolicyEnforcementPoint(EngineConfig(policy_path=Path("rules.json")))
    pep.activate()
    pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "demo")])
"""

from fcrepo_pep.config import EngineConfig, LoggingConfig, PepConfig, load_pep_config
from fcrepo_pep.exceptions import (
    AuthorizationDeniedError,
    AuthorizationError,
    AuthorizationOperationalError,
    ConfigurationError,
    EngineUnavailableError,
)
from fcrepo_pep.pdp import Decision, Result, combine
from fcrepo_pep.pep import EngineHandle, PolicyEnforcementPoint

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "EngineConfig",
    "LoggingConfig",
    "PepConfig",
    "load_pep_config",
    # Enforcement
    "EngineHandle",
    "PolicyEnforcementPoint",
    # Decisions
    "Decision",
    "Result",
    "combine",
    # Errors
    "AuthorizationDeniedError",
    "AuthorizationError",
    "AuthorizationOperationalError",
    "ConfigurationError",
    "EngineUnavailableError",
]
