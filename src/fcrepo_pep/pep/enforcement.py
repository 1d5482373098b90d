"""Policy Enforcement Point - frame requests, consult the engine, enforce.

Request flow for one enforce() call:
1. Wrap the subject and the action once (shared by the whole batch)
2. Capture the active engine once, so the batch sees exactly one engine
3. For each resource: wrap it, build a Request, evaluate it
4. Combine per resource with the deny-biased combiner; every resource must pass
5. Audit the outcome

Each call ends in exactly one of four ways: allow (True), deny (False),
AuthorizationOperationalError, or EngineUnavailableError. Any failure while
evaluating the batch aborts the whole call; there are no partial decisions.
"""

from __future__ import annotations

__all__ = [
    "PolicyEnforcementPoint",
    "ResourceLike",
]

import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Sequence

from fcrepo_pep.config import (
    EngineConfig,
    PepConfig,
    get_audit_log_path,
    get_system_log_path,
)
from fcrepo_pep.constants import SUBJECT_LOGIN_ID_URI
from fcrepo_pep.context.attributes import Request
from fcrepo_pep.context.resource import ResourceRef
from fcrepo_pep.context.wrappers import wrap_action, wrap_resource, wrap_subject
from fcrepo_pep.exceptions import (
    AuthorizationDeniedError,
    AuthorizationOperationalError,
    EngineUnavailableError,
)
from fcrepo_pep.pdp.combiner import BatchDecision, combine_batch
from fcrepo_pep.pdp.decision import Decision, Result
from fcrepo_pep.pep.handle import EngineHandle
from fcrepo_pep.telemetry.audit import EnforcementAuditLogger
from fcrepo_pep.telemetry.models import EnforcementEvent, ResourceDecisionLog
from fcrepo_pep.telemetry.system import configure_system_logger, get_system_logger

if TYPE_CHECKING:
    from fcrepo_pep.context.request_context import RequestContext
    from fcrepo_pep.pdp.protocol import DecisionEngineProtocol, EngineFactory
    from fcrepo_pep.telemetry.models import EnforcementOutcome

_system_logger = get_system_logger()

# A ResourceRef or a plain (resource_id, namespace) pair
ResourceLike = ResourceRef | tuple[str, str]


def _as_log_str(value: object) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return repr(value)


def _normalize_resources(resources: Iterable[ResourceLike]) -> list[ResourceRef]:
    if isinstance(resources, (str, bytes)):
        raise AuthorizationOperationalError("resources must be a sequence of (resource_id, namespace) pairs")
    try:
        items = list(resources)
    except TypeError as e:
        raise AuthorizationOperationalError(f"resources is not iterable: {type(resources).__name__}") from e

    refs: list[ResourceRef] = []
    for item in items:
        if isinstance(item, ResourceRef):
            refs.append(item)
        elif isinstance(item, Sequence) and not isinstance(item, (str, bytes)) and len(item) == 2:
            refs.append(ResourceRef(*item))
        else:
            raise AuthorizationOperationalError(f"Malformed resource entry: {item!r}")
    return refs


class PolicyEnforcementPoint:
    """Authorizes repository operations against a pluggable decision engine.

    The engine handle is the only shared mutable state. activate(),
    reload_policy() and deactivate() are its only mutators; enforce() may
    run concurrently with all of them.

    Usage:
        pep = PolicyEnforcementPoint(EngineConfig(policy_path=rules_path))
        pep.activate()
        allowed = pep.enforce("fedoraAdmin", "getDatastream", "API-A", "",
                              [("obj:42", "example-ns")])
    """

    def __init__(
        self,
        config: EngineConfig,
        *,
        engine_factory: "EngineFactory | None" = None,
        audit_logger: EnforcementAuditLogger | None = None,
    ) -> None:
        """Create an inactive PEP.

        Args:
            config: Immutable engine configuration, used for every (re)build.
            engine_factory: Builds engines from config. Defaults to build_engine().
            audit_logger: Receives one event per enforce() call. None disables auditing.
        """
        self._config = config
        self._handle = EngineHandle(engine_factory)
        self._audit_logger = audit_logger

    @classmethod
    def from_config(
        cls,
        config: PepConfig,
        *,
        engine_factory: "EngineFactory | None" = None,
    ) -> "PolicyEnforcementPoint":
        """Create a PEP with logging set up from a PepConfig.

        Configures the system logger level and, when log_dir is set, the
        system.jsonl and enforcement.jsonl files.
        """
        system_log_path = get_system_log_path(config.logging)
        configure_system_logger(config.logging.log_level, system_log_path)

        audit_logger = None
        audit_log_path: Path | None = get_audit_log_path(config.logging)
        if audit_log_path is not None:
            audit_logger = EnforcementAuditLogger.for_path(audit_log_path)

        return cls(config.engine, engine_factory=engine_factory, audit_logger=audit_logger)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def handle(self) -> EngineHandle:
        return self._handle

    @property
    def is_active(self) -> bool:
        return self._handle.is_active

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def activate(self) -> int:
        """Build the first engine from config. Calling again reloads.

        Returns:
            Generation number of the active engine.
        """
        return self._handle.initialize(self._config)

    def reload_policy(self) -> int:
        """Swap in a freshly built engine; in-flight calls finish on the old one.

        Returns:
            Generation number of the active engine.

        Raises:
            EngineUnavailableError: If the PEP is not active.
        """
        return self._handle.reload()

    def deactivate(self) -> None:
        """Tear down the engine. enforce() then fails with EngineUnavailableError."""
        self._handle.teardown()

    # -------------------------------------------------------------------------
    # Enforcement
    # -------------------------------------------------------------------------

    def enforce(
        self,
        subject_id: str | None,
        action_id: str,
        action_api: str,
        context_index: str,
        resources: Sequence[ResourceLike],
    ) -> bool:
        """Decide whether subject may perform action on every resource.

        Args:
            subject_id: Caller login id; None or "" for anonymous.
            action_id: Action being attempted (e.g. "getDatastream").
            action_api: Interface of the action (e.g. "API-A").
            context_index: Batch/session correlation id.
            resources: Ordered (resource_id, namespace) pairs or ResourceRefs.

        Returns:
            True if every resource resolved to a permit with no deny,
            indeterminate or unrecognized result; False otherwise.

        Raises:
            EngineUnavailableError: If the PEP is not active.
            AuthorizationOperationalError: On malformed input or engine failure.
        """
        return self._enforce(subject_id, action_id, action_api, context_index, resources).permitted

    def enforce_or_raise(
        self,
        subject_id: str | None,
        action_id: str,
        action_api: str,
        context_index: str,
        resources: Sequence[ResourceLike],
    ) -> None:
        """Like enforce(), but a deny raises AuthorizationDeniedError.

        Raises:
            AuthorizationDeniedError: If the combined decision is deny.
            EngineUnavailableError: If the PEP is not active.
            AuthorizationOperationalError: On malformed input or engine failure.
        """
        decision = self._enforce(subject_id, action_id, action_api, context_index, resources)
        if not decision.permitted:
            raise AuthorizationDeniedError(
                f"Authorization denied: {action_id} ({decision.reason})",
                subject_id=subject_id,
                action_id=action_id,
                decision=decision,
            )

    def enforce_for_context(
        self,
        context: "RequestContext",
        action_id: str,
        action_api: str,
        context_index: str,
        resources: Sequence[ResourceLike],
    ) -> bool:
        """enforce() with the subject login id taken from a request context."""
        subject_id = context.get_subject_value(SUBJECT_LOGIN_ID_URI)
        return self.enforce(subject_id, action_id, action_api, context_index, resources)

    def _enforce(
        self,
        subject_id: str | None,
        action_id: str,
        action_api: str,
        context_index: str,
        resources: Sequence[ResourceLike],
    ) -> BatchDecision:
        started = time.perf_counter()
        refs: list[ResourceRef] = []
        per_resource: list[list[Result]] = []
        generation: int | None = None

        try:
            refs = _normalize_resources(resources)
            subject = wrap_subject(subject_id)
            action = wrap_action(action_id, action_api, context_index)

            snapshot = self._handle.snapshot()
            generation = snapshot.generation

            for ref in refs:
                request = Request(
                    subject=subject,
                    action=action,
                    resource=wrap_resource(ref.resource_id, ref.namespace),
                )
                per_resource.append(self._evaluate(snapshot.engine, request))
        except EngineUnavailableError as e:
            self._audit(
                "engine_unavailable",
                subject_id, action_id, action_api, context_index, refs, per_resource,
                started=started, generation=generation, error=e,
            )
            raise
        except AuthorizationOperationalError as e:
            self._audit(
                "operational_error",
                subject_id, action_id, action_api, context_index, refs, per_resource,
                started=started, generation=generation, error=e,
            )
            raise

        decision = combine_batch(per_resource)
        self._audit(
            "allow" if decision.permitted else "deny",
            subject_id, action_id, action_api, context_index, refs, per_resource,
            started=started, generation=generation, decision=decision,
        )
        return decision

    @staticmethod
    def _evaluate(engine: "DecisionEngineProtocol", request: Request) -> list[Result]:
        # Lazy outputs are drained inside the guard
        try:
            output = engine.evaluate(request)
            if isinstance(output, Result):
                return [output]
            if isinstance(output, (str, bytes)) or not isinstance(output, Iterable):
                items: list[object] = [output]
            else:
                items = list(output)
        except AuthorizationOperationalError:
            raise
        except Exception as e:
            raise AuthorizationOperationalError(f"Decision engine failed: {type(e).__name__}: {e}") from e

        results: list[Result] = []
        for item in items:
            if isinstance(item, Result):
                results.append(item)
                continue
            _system_logger.warning(
                {
                    "event": "engine_returned_non_result",
                    "message": f"Decision engine returned {type(item).__name__}; treating as unrecognized",
                    "result_type": type(item).__name__,
                }
            )
            results.append(Result(decision=Decision.UNRECOGNIZED))
        return results

    def _audit(
        self,
        outcome: "EnforcementOutcome",
        subject_id: str | None,
        action_id: str,
        action_api: str,
        context_index: str,
        refs: list[ResourceRef],
        per_resource: list[list[Result]],
        *,
        started: float,
        generation: int | None,
        decision: BatchDecision | None = None,
        error: Exception | None = None,
    ) -> None:
        if self._audit_logger is None:
            return

        resource_logs = []
        for i, ref in enumerate(refs):
            logged = None
            if i < len(per_resource):
                logged = ",".join(result.decision.value for result in per_resource[i])
            resource_logs.append(
                ResourceDecisionLog(
                    resource_id=_as_log_str(ref.resource_id),
                    namespace=_as_log_str(ref.namespace),
                    decision=logged,
                )
            )

        self._audit_logger.log(
            EnforcementEvent(
                outcome=outcome,
                reason=decision.reason if decision is not None else None,
                subject_id=_as_log_str(subject_id),
                action_id=_as_log_str(action_id),
                action_api=_as_log_str(action_api),
                context_index=_as_log_str(context_index),
                resources=resource_logs,
                tally=decision.tally.as_dict() if decision is not None else None,
                engine_generation=generation,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
                error_type=type(error).__name__ if error is not None else None,
                error=str(error) if error is not None else None,
            )
        )
