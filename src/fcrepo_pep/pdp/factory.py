"""Build decision engines from EngineConfig.

build_engine() is the default EngineFactory used by the engine handle.
It is called once per initialize/reload, always from the same stored
configuration, and returns a fully constructed engine or raises.
"""

from __future__ import annotations

__all__ = [
    "build_engine",
    "load_rule_table",
]

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import TypeAdapter

from fcrepo_pep.exceptions import ConfigurationError
from fcrepo_pep.pdp.protocol import DecisionEngineProtocol
from fcrepo_pep.pdp.table import TableDecisionEngine, TableRule, TableRuleFile
from fcrepo_pep.pdp.timeout import TimeoutDecisionEngine
from fcrepo_pep.utils.file_helpers import load_validated_json, require_file_exists

if TYPE_CHECKING:
    from fcrepo_pep.config import EngineConfig

_RULE_TABLE_ADAPTER: TypeAdapter[list[TableRule] | TableRuleFile] = TypeAdapter(list[TableRule] | TableRuleFile)


def load_rule_table(path: Path) -> list[TableRule]:
    """Load a JSON rule table (a list of rules, or {"rules": [...]}).

    Raises:
        ConfigurationError: If the file is missing or invalid.
    """
    try:
        require_file_exists(path, file_type="policy")
        loaded = load_validated_json(path, _RULE_TABLE_ADAPTER, file_type="policy")
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e
    if isinstance(loaded, TableRuleFile):
        return list(loaded.rules)
    return loaded


def build_engine(config: "EngineConfig") -> DecisionEngineProtocol:
    """Build a new engine instance from configuration.

    Args:
        config: Immutable engine configuration.

    Returns:
        A ready-to-use engine. Wrapped in TimeoutDecisionEngine when
        config.timeout_seconds is set.

    Raises:
        ConfigurationError: If the rule table cannot be loaded.
    """
    rules = list(config.rules)
    if config.policy_path is not None:
        rules.extend(load_rule_table(config.policy_path))

    engine: DecisionEngineProtocol = TableDecisionEngine(rules, default_decision=config.default_decision)
    if config.timeout_seconds is not None:
        engine = TimeoutDecisionEngine(engine, config.timeout_seconds)
    return engine
