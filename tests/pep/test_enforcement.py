"""Unit tests for PolicyEnforcementPoint.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.

Tests cover:
- End-to-end enforcement against the table engine
- The four outcomes (allow, deny, operational error, engine unavailable)
- Per-resource combining for batches
- Reload while enforcing
- Enforcement audit events
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from fcrepo_pep.config import EngineConfig, LoggingConfig, PepConfig
from fcrepo_pep.constants import RESOURCE_ID_URI, SUBJECT_LOGIN_ID_URI
from fcrepo_pep.context.attributes import Request
from fcrepo_pep.context.request_context import StaticRequestContext
from fcrepo_pep.context.resource import ResourceRef
from fcrepo_pep.exceptions import (
    AuthorizationDeniedError,
    AuthorizationOperationalError,
    ConfigurationError,
    EngineUnavailableError,
)
from fcrepo_pep.pdp.decision import Decision, Result
from fcrepo_pep.pep.enforcement import PolicyEnforcementPoint
from fcrepo_pep.telemetry.audit import EnforcementAuditLogger
from fcrepo_pep.telemetry.models import EnforcementEvent


# ============================================================================
# Fixtures
# ============================================================================


def engine_returning(*outputs: object) -> MagicMock:
    """Engine whose evaluate() returns the given outputs in order."""
    engine = MagicMock()
    engine.evaluate.side_effect = list(outputs)
    return engine


def pep_with_engine(engine: object, audit_logger: EnforcementAuditLogger | None = None) -> PolicyEnforcementPoint:
    pep = PolicyEnforcementPoint(EngineConfig(), engine_factory=lambda config: engine, audit_logger=audit_logger)
    pep.activate()
    return pep


@pytest.fixture
def audit_logger() -> MagicMock:
    return MagicMock(spec=EnforcementAuditLogger)


@pytest.fixture
def pep(engine_config: EngineConfig, audit_logger: MagicMock) -> PolicyEnforcementPoint:
    """Active PEP over the table engine built from the shared admin rules."""
    pep = PolicyEnforcementPoint(engine_config, audit_logger=audit_logger)
    pep.activate()
    return pep


def last_event(audit_logger: MagicMock) -> EnforcementEvent:
    return audit_logger.log.call_args.args[0]


# ============================================================================
# Tests: End-to-end decisions
# ============================================================================


class TestEnforceDecisions:
    """enforce() against the table engine."""

    def test_admin_permitted_on_single_resource(self, pep: PolicyEnforcementPoint) -> None:
        """A matching permit rule authorizes the request."""
        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "example-ns")]) is True

    def test_deny_on_any_resource_denies_batch(self, pep: PolicyEnforcementPoint) -> None:
        """A deny for one resource denies the whole batch."""
        # Act & Assert
        resources = [("obj:42", "example-ns"), ("obj:13", "example-ns")]
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", resources) is False

    def test_not_applicable_resource_denies_batch(self, pep: PolicyEnforcementPoint) -> None:
        """A permit on one resource does not cover an untargeted one."""
        # Act & Assert
        resources = [("obj:42", "example-ns"), ("obj:43", "example-ns")]
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", resources) is False

    def test_indeterminate_denies(self, pep: PolicyEnforcementPoint) -> None:
        """INDETERMINATE is never an allow."""
        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:44", "")]) is False

    def test_anonymous_caller_not_matched_by_named_rule(self, pep: PolicyEnforcementPoint) -> None:
        """An anonymous subject does not inherit another subject's permit."""
        # Act & Assert
        assert pep.enforce(None, "getDatastream", "API-A", "", [("obj:42", "example-ns")]) is False
        assert pep.enforce("", "getDatastream", "API-A", "", [("obj:42", "example-ns")]) is False

    def test_empty_batch_is_denied(self, pep: PolicyEnforcementPoint) -> None:
        """A call with no resources is never authorized."""
        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", []) is False

    def test_accepts_resource_refs(self, pep: PolicyEnforcementPoint) -> None:
        """ResourceRef and plain tuples are interchangeable."""
        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [ResourceRef("obj:42")]) is True

    def test_accepts_two_element_lists(self, pep: PolicyEnforcementPoint) -> None:
        """Deserialized [resource_id, namespace] lists are valid entries."""
        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [["obj:42", "ns"]]) is True

    def test_repeated_calls_are_stable(self, pep: PolicyEnforcementPoint) -> None:
        """The same inputs give the same outcome every time."""
        # Act
        outcomes = {pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "ns")]) for _ in range(10)}

        # Assert
        assert outcomes == {True}

    def test_enforce_for_context_uses_subject_login_id(self) -> None:
        """The subject comes from the request context's login id."""
        # Arrange
        engine = MagicMock()
        engine.evaluate.return_value = Result(decision=Decision.PERMIT)
        pep = pep_with_engine(engine)

        # Act
        allowed = pep.enforce_for_context(StaticRequestContext(), "getDatastream", "API-A", "", [("obj:42", "")])

        # Assert
        assert allowed is True
        request: Request = engine.evaluate.call_args.args[0]
        assert request.subject.value_of(SUBJECT_LOGIN_ID_URI) == "fedoraAdmin"


# ============================================================================
# Tests: Request framing
# ============================================================================


class TestRequestFraming:
    """What the engine receives for a batch."""

    def test_one_request_per_resource_in_order(self) -> None:
        """Each resource becomes one Request, sharing subject and action sets."""
        # Arrange
        engine = MagicMock()
        engine.evaluate.return_value = Result(decision=Decision.PERMIT)
        pep = pep_with_engine(engine)

        # Act
        pep.enforce("fedoraAdmin", "getDatastream", "API-A", "ctx", [("obj:1", "a"), ("obj:2", "b"), ("obj:3", "c")])

        # Assert
        requests = [call.args[0] for call in engine.evaluate.call_args_list]
        assert [r.resource.value_of(RESOURCE_ID_URI) for r in requests] == ["obj:1", "obj:2", "obj:3"]
        assert requests[0].subject is requests[2].subject
        assert requests[0].action is requests[2].action

    def test_engine_may_return_several_results(self) -> None:
        """A collection of Results for one resource is combined as a group."""
        # Arrange
        engine = engine_returning(
            [Result(decision=Decision.PERMIT), Result(decision=Decision.NOT_APPLICABLE)],
        )
        pep = pep_with_engine(engine)

        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")]) is True

    def test_non_result_output_is_unrecognized(self, audit_logger: MagicMock) -> None:
        """Output that is not a Result counts as unrecognized and denies."""
        # Arrange
        engine = engine_returning([Result(decision=Decision.PERMIT), "permit"])
        pep = pep_with_engine(engine, audit_logger)

        # Act
        with patch("fcrepo_pep.pep.enforcement._system_logger") as mock_logger:
            allowed = pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

        # Assert
        assert allowed is False
        assert last_event(audit_logger).reason == "unrecognized"
        assert mock_logger.warning.call_args.args[0]["event"] == "engine_returned_non_result"

    def test_bare_non_result_is_unrecognized(self) -> None:
        """A single foreign object is treated like one unrecognized Result."""
        # Arrange
        pep = pep_with_engine(engine_returning(None))

        # Act & Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")]) is False


# ============================================================================
# Tests: Errors
# ============================================================================


class TestEnforceErrors:
    """Operational errors and engine unavailability."""

    def test_before_activate_raises_engine_unavailable(self, engine_config: EngineConfig) -> None:
        """No engine means no decision, not a deny."""
        # Arrange
        pep = PolicyEnforcementPoint(engine_config)

        # Act & Assert
        with pytest.raises(EngineUnavailableError):
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

    def test_after_deactivate_raises_engine_unavailable(self, pep: PolicyEnforcementPoint) -> None:
        """Deactivation makes later calls fail with EngineUnavailableError."""
        # Arrange
        pep.deactivate()

        # Act & Assert
        assert pep.is_active is False
        with pytest.raises(EngineUnavailableError):
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

    def test_engine_exception_becomes_operational_error(self) -> None:
        """Engine failures abort the call with the cause chained."""
        # Arrange
        engine = MagicMock()
        engine.evaluate.side_effect = RuntimeError("policy store offline")
        pep = pep_with_engine(engine)

        # Act & Assert
        with pytest.raises(AuthorizationOperationalError, match="policy store offline") as exc_info:
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert not isinstance(exc_info.value, EngineUnavailableError)

    def test_failure_midway_aborts_whole_batch(self) -> None:
        """An error on a later resource discards earlier permits."""
        # Arrange
        engine = engine_returning(Result(decision=Decision.PERMIT), RuntimeError("boom"))
        pep = pep_with_engine(engine)

        # Act & Assert
        with pytest.raises(AuthorizationOperationalError):
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:1", ""), ("obj:2", "")])

    def test_lazy_output_failure_is_wrapped_and_audited(self, audit_logger: MagicMock) -> None:
        """A generator that fails while being read is an operational error."""

        # Arrange
        def dropping_results() -> Iterator[Result]:
            yield Result(decision=Decision.PERMIT)
            raise RuntimeError("backend dropped")

        engine = MagicMock()
        engine.evaluate.side_effect = lambda request: dropping_results()
        pep = pep_with_engine(engine, audit_logger)

        # Act
        with pytest.raises(AuthorizationOperationalError, match="backend dropped") as exc_info:
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

        # Assert
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        audit_logger.log.assert_called_once()
        assert last_event(audit_logger).outcome == "operational_error"

    @pytest.mark.parametrize(
        "resources",
        [
            pytest.param("obj:42", id="string"),
            pytest.param(42, id="not_iterable"),
            pytest.param([("obj:42",)], id="short_tuple"),
            pytest.param([["obj:42", "ns", "extra"]], id="long_list"),
            pytest.param(["ns"], id="two_char_string_entry"),
            pytest.param([(None, "ns")], id="missing_id"),
        ],
    )
    def test_malformed_resources(self, pep: PolicyEnforcementPoint, resources: object) -> None:
        """Resources that cannot be identified are operational errors."""
        # Act & Assert
        with pytest.raises(AuthorizationOperationalError):
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", resources)  # type: ignore[arg-type]

    def test_missing_action_is_operational_error(self, pep: PolicyEnforcementPoint) -> None:
        """A missing action id cannot be framed."""
        # Act & Assert
        with pytest.raises(AuthorizationOperationalError, match="action_id"):
            pep.enforce("fedoraAdmin", None, "API-A", "", [("obj:42", "")])  # type: ignore[arg-type]


# ============================================================================
# Tests: enforce_or_raise()
# ============================================================================


class TestEnforceOrRaise:
    """Tests for enforce_or_raise()."""

    def test_allow_returns_none(self, pep: PolicyEnforcementPoint) -> None:
        """Nothing is raised on allow."""
        # Act & Assert
        assert pep.enforce_or_raise("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")]) is None

    def test_deny_raises_with_decision(self, pep: PolicyEnforcementPoint) -> None:
        """A deny raises AuthorizationDeniedError carrying the batch decision."""
        # Act
        with pytest.raises(AuthorizationDeniedError) as exc_info:
            pep.enforce_or_raise("fedoraAdmin", "getDatastream", "API-A", "", [("obj:13", "")])

        # Assert
        err = exc_info.value
        assert err.reason == "deny"
        assert err.tally is not None and err.tally.denies == 1
        assert err.to_dict() == {
            "message": "Authorization denied: getDatastream (deny)",
            "subject_id": "fedoraAdmin",
            "action_id": "getDatastream",
            "reason": "deny",
            "tally": {"permits": 0, "denies": 1, "indeterminates": 0, "not_applicables": 0, "unrecognized": 0},
        }
        assert "reason='deny'" in repr(err)

    def test_operational_errors_are_not_denials(self, engine_config: EngineConfig) -> None:
        """EngineUnavailableError propagates instead of AuthorizationDeniedError."""
        # Arrange
        pep = PolicyEnforcementPoint(engine_config)

        # Act & Assert
        with pytest.raises(EngineUnavailableError):
            pep.enforce_or_raise("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])


# ============================================================================
# Tests: Reload
# ============================================================================


class TestReloadPolicy:
    """reload_policy() and its interaction with enforce()."""

    def test_reload_picks_up_rule_changes(self, rules_file: Path) -> None:
        """Edits to the rule table take effect after reload_policy()."""
        # Arrange
        pep = PolicyEnforcementPoint(EngineConfig(policy_path=rules_file))
        pep.activate()
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")]) is True
        rules_file.write_text(json.dumps([{"resource_id": "obj:42", "decision": "deny"}]))

        # Act
        generation = pep.reload_policy()

        # Assert
        assert generation == 2
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")]) is False

    def test_broken_reload_keeps_serving_old_policy(self, rules_file: Path) -> None:
        """A rule table that fails to load leaves the previous engine active."""
        # Arrange
        pep = PolicyEnforcementPoint(EngineConfig(policy_path=rules_file))
        pep.activate()
        rules_file.write_text("[{broken")

        # Act
        with pytest.raises(ConfigurationError):
            pep.reload_policy()

        # Assert
        assert pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")]) is True

    def test_reload_before_activate_fails(self, engine_config: EngineConfig) -> None:
        """There is nothing to reload before activate()."""
        # Act & Assert
        with pytest.raises(EngineUnavailableError):
            PolicyEnforcementPoint(engine_config).reload_policy()

    def test_batch_is_evaluated_by_one_engine(self) -> None:
        """A reload in the middle of a batch does not mix engines."""
        # Arrange
        swapped = threading.Event()
        seen: list[str] = []
        engines_built = {"n": 0}

        def factory(config: EngineConfig) -> object:
            engines_built["n"] += 1
            name = f"engine-{engines_built['n']}"

            class Engine:
                def evaluate(self, request: Request) -> Result:
                    seen.append(name)
                    if name == "engine-1" and len(seen) == 1:
                        # Swap while the first engine is mid-batch
                        pep.reload_policy()
                        swapped.set()
                    return Result(decision=Decision.PERMIT)

            return Engine()

        pep = PolicyEnforcementPoint(EngineConfig(), engine_factory=factory)
        pep.activate()

        # Act
        allowed = pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:1", ""), ("obj:2", ""), ("obj:3", "")])

        # Assert
        assert swapped.is_set()
        assert allowed is True
        assert seen == ["engine-1", "engine-1", "engine-1"]
        assert pep.handle.generation == 2

    def test_parallel_enforce_during_reloads(self, engine_config: EngineConfig) -> None:
        """Concurrent callers always get a decision while reloads run."""
        # Arrange
        pep = PolicyEnforcementPoint(engine_config)
        pep.activate()
        stop = threading.Event()

        def reload_loop() -> None:
            while not stop.is_set():
                pep.reload_policy()

        def call(i: int) -> bool:
            # Odd calls include the denied obj:13
            resources = [("obj:42", "")] if i % 2 == 0 else [("obj:42", ""), ("obj:13", "")]
            return pep.enforce("fedoraAdmin", "getDatastream", "API-A", str(i), resources)

        # Act
        reloader = threading.Thread(target=reload_loop)
        reloader.start()
        try:
            with ThreadPoolExecutor(max_workers=16) as pool:
                outcomes = list(pool.map(call, range(100)))
        finally:
            stop.set()
            reloader.join(timeout=5)

        # Assert
        assert outcomes == [i % 2 == 0 for i in range(100)]


# ============================================================================
# Tests: Audit
# ============================================================================


class TestEnforcementAudit:
    """Every enforce() call emits exactly one audit event."""

    def test_allow_event(self, pep: PolicyEnforcementPoint, audit_logger: MagicMock) -> None:
        """Allowed calls are audited with tally and engine generation."""
        # Act
        pep.enforce("fedoraAdmin", "getDatastream", "API-A", "ctx-7", [("obj:42", "example-ns")])

        # Assert
        audit_logger.log.assert_called_once()
        event = last_event(audit_logger)
        assert event.outcome == "allow"
        assert event.reason == "permit"
        assert event.subject_id == "fedoraAdmin"
        assert event.context_index == "ctx-7"
        assert event.engine_generation == 1
        assert event.tally is not None and event.tally["permits"] == 1
        assert event.resources[0].resource_id == "obj:42"
        assert event.resources[0].decision == "permit"

    def test_deny_event(self, pep: PolicyEnforcementPoint, audit_logger: MagicMock) -> None:
        """Denied calls record each resource's decision."""
        # Act
        pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", ""), ("obj:43", "")])

        # Assert
        event = last_event(audit_logger)
        assert event.outcome == "deny"
        assert event.reason == "no_permit"
        assert [r.decision for r in event.resources] == ["permit", "not_applicable"]

    def test_engine_unavailable_event(self, engine_config: EngineConfig, audit_logger: MagicMock) -> None:
        """Calls without an engine are audited as engine_unavailable."""
        # Arrange
        pep = PolicyEnforcementPoint(engine_config, audit_logger=audit_logger)

        # Act
        with pytest.raises(EngineUnavailableError):
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

        # Assert
        event = last_event(audit_logger)
        assert event.outcome == "engine_unavailable"
        assert event.error_type == "EngineUnavailableError"
        assert event.tally is None

    def test_operational_error_event(self, audit_logger: MagicMock) -> None:
        """Engine failures are audited with the error."""
        # Arrange
        engine = MagicMock()
        engine.evaluate.side_effect = RuntimeError("boom")
        pep = pep_with_engine(engine, audit_logger)

        # Act
        with pytest.raises(AuthorizationOperationalError):
            pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

        # Assert
        event = last_event(audit_logger)
        assert event.outcome == "operational_error"
        assert event.error is not None and "boom" in event.error
        assert event.resources[0].decision is None

    def test_malformed_input_is_logged_safely(self, pep: PolicyEnforcementPoint, audit_logger: MagicMock) -> None:
        """Non-string input is recorded by repr, not rejected by the audit model."""
        # Act
        with pytest.raises(AuthorizationOperationalError):
            pep.enforce(42, "getDatastream", "API-A", "", [("obj:42", "")])  # type: ignore[arg-type]

        # Assert
        assert last_event(audit_logger).subject_id == "42"


# ============================================================================
# Tests: from_config()
# ============================================================================


class TestFromConfig:
    """Tests for PolicyEnforcementPoint.from_config()."""

    def test_writes_audit_file(self, tmp_path: Path, rules_file: Path) -> None:
        """With log_dir set, enforcement events land in enforcement.jsonl."""
        # Arrange
        config = PepConfig(
            engine=EngineConfig(policy_path=rules_file),
            logging=LoggingConfig(log_dir=str(tmp_path / "logs")),
        )
        pep = PolicyEnforcementPoint.from_config(config)
        pep.activate()

        # Act
        pep.enforce("fedoraAdmin", "getDatastream", "API-A", "", [("obj:42", "")])

        # Assert
        audit_path = tmp_path / "logs" / "fcrepo-pep" / "audit" / "enforcement.jsonl"
        lines = audit_path.read_text().strip().splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["event"] == "enforcement"
        assert entry["outcome"] == "allow"
        assert entry["time"].endswith("Z")

    def test_without_log_dir_no_audit(self, rules_file: Path) -> None:
        """Without log_dir nothing is written to disk."""
        # Arrange
        config = PepConfig(engine=EngineConfig(policy_path=rules_file))

        # Act
        pep = PolicyEnforcementPoint.from_config(config)

        # Assert
        assert pep._audit_logger is None
        assert pep.config.policy_path == rules_file
