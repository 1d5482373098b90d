"""Application configuration for fcrepo-pep.

Defines configuration models for the decision engine and logging.
Configuration is immutable once loaded: the engine handle keeps the
EngineConfig it was initialized with and rebuilds engines from it on reload.

Example usage:
    config = load_pep_config(Path("pep.json"))
    pep = PolicyEnforcementPoint(config.engine)

Example file:
    {
        "engine": {
            "policy_path": "/etc/fcrepo-pep/rules.json",
            "default_decision": "not_applicable",
            "timeout_seconds": 2.0
        },
        "logging": {"log_dir": "/var/log", "log_level": "INFO"}
    }
"""

from __future__ import annotations

__all__ = [
    "EngineConfig",
    "LoggingConfig",
    "PepConfig",
    "get_audit_log_path",
    "get_system_log_path",
    "load_pep_config",
]

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fcrepo_pep.constants import (
    APP_NAME,
    AUDIT_LOG_FILENAME,
    MAX_ENGINE_TIMEOUT_SECONDS,
    MIN_ENGINE_TIMEOUT_SECONDS,
)
from fcrepo_pep.exceptions import ConfigurationError
from fcrepo_pep.pdp.decision import Decision
from fcrepo_pep.pdp.table import TableRule
from fcrepo_pep.utils.file_helpers import load_validated_json, require_file_exists


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Logs are stored under <log_dir>/fcrepo-pep/:
        <log_dir>/
        └── fcrepo-pep/
            ├── system/
            │   └── system.jsonl       # WARNING and above
            └── audit/
                └── enforcement.jsonl  # every enforcement outcome

    Attributes:
        log_dir: Base directory for logs. None disables file logging.
        log_level: DEBUG also logs every wrapped attribute and decision tally.
    """

    log_dir: str | None = Field(default=None, min_length=1)
    log_level: Literal["DEBUG", "INFO"] = "INFO"

    model_config = ConfigDict(frozen=True)


class EngineConfig(BaseModel):
    """Immutable recipe for building a decision engine.

    Every build re-reads policy_path, so reloading an engine picks up
    edits to the rule table while the configuration itself stays fixed.

    Attributes:
        kind: Engine implementation. Only the built-in table engine for now.
        policy_path: Optional JSON rule table, appended after inline rules.
        rules: Inline rules, evaluated first.
        default_decision: Decision when no rule matches.
        timeout_seconds: Per-evaluation timeout; None disables it.
    """

    kind: Literal["table"] = "table"
    policy_path: Path | None = None
    rules: tuple[TableRule, ...] = ()
    default_decision: Decision = Decision.NOT_APPLICABLE
    timeout_seconds: float | None = Field(
        default=None,
        ge=MIN_ENGINE_TIMEOUT_SECONDS,
        le=MAX_ENGINE_TIMEOUT_SECONDS,
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("default_decision", mode="before")
    @classmethod
    def reject_unknown_default(cls, v: object) -> Decision:
        decision = Decision.coerce(v)
        if decision is Decision.UNRECOGNIZED:
            raise ValueError(f"Unknown default decision {v!r}")
        return decision


class PepConfig(BaseModel):
    """Top-level configuration file model."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(frozen=True)


def load_pep_config(path: Path) -> PepConfig:
    """Load and validate a configuration file.

    A relative engine.policy_path is resolved against the config file's
    directory.

    Raises:
        ConfigurationError: If the file is missing, unreadable, not JSON,
            or fails validation.
    """
    try:
        require_file_exists(path, file_type="configuration")
        config: PepConfig = load_validated_json(path, PepConfig, file_type="configuration")
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e

    policy_path = config.engine.policy_path
    if policy_path is not None and not policy_path.is_absolute():
        engine = config.engine.model_copy(update={"policy_path": path.parent / policy_path})
        config = config.model_copy(update={"engine": engine})
    return config


def _log_root(config: LoggingConfig) -> Path | None:
    if config.log_dir is None:
        return None
    return Path(config.log_dir).expanduser() / APP_NAME


def get_audit_log_path(config: LoggingConfig) -> Path | None:
    """Path to enforcement.jsonl, or None when file logging is disabled."""
    root = _log_root(config)
    return root / "audit" / AUDIT_LOG_FILENAME if root is not None else None


def get_system_log_path(config: LoggingConfig) -> Path | None:
    """Path to system.jsonl, or None when file logging is disabled."""
    root = _log_root(config)
    return root / "system" / "system.jsonl" if root is not None else None
