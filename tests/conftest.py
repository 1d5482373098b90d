"""Shared fixtures for fcrepo-pep tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from fcrepo_pep.config import EngineConfig
from fcrepo_pep.pdp.decision import Decision
from fcrepo_pep.pdp.table import TableRule


@pytest.fixture
def admin_rules() -> list[TableRule]:
    """Rules permitting fedoraAdmin to read obj:42 and denying obj:13."""
    return [
        TableRule(
            id="admin-read-42",
            subject_id="fedoraAdmin",
            action_id="getDatastream",
            resource_id="obj:42",
            decision=Decision.PERMIT,
        ),
        TableRule(
            id="nobody-reads-13",
            action_id="getDatastream",
            resource_id="obj:13",
            decision=Decision.DENY,
        ),
        TableRule(
            id="broken-44",
            resource_id="obj:44",
            decision=Decision.INDETERMINATE,
        ),
    ]


@pytest.fixture
def engine_config(admin_rules: list[TableRule]) -> EngineConfig:
    """Engine config with inline rules only."""
    return EngineConfig(rules=tuple(admin_rules))


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """Rule table on disk, permitting fedoraAdmin to read obj:42."""
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "admin-read-42",
                    "subject_id": "fedoraAdmin",
                    "action_id": "getDatastream",
                    "resource_id": "obj:42",
                    "decision": "permit",
                }
            ]
        )
    )
    return path
