"""Reference decision engine backed by an exact-match rule table.

This is not a policy language: each rule names exact attribute values
(or None for "any") and the decision to return. The first matching rule
decides; a request no rule matches gets the table's default decision
(NOT_APPLICABLE unless configured otherwise).

Rule table file format (JSON list, or {"rules": [...]}):

    [
        {"id": "admin-read", "subject_id": "fedoraAdmin",
         "action_id": "getDatastream", "resource_id": "obj:42",
         "decision": "permit"}
    ]
"""

from __future__ import annotations

__all__ = [
    "TableDecisionEngine",
    "TableRule",
    "TableRuleFile",
]

from typing import Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from fcrepo_pep.constants import (
    ACTION_API_URI,
    ACTION_CONTEXT_URI,
    ACTION_ID_URI,
    RESOURCE_ID_URI,
    RESOURCE_NAMESPACE_URI,
    SUBJECT_LOGIN_ID_URI,
)
from fcrepo_pep.context.attributes import Request
from fcrepo_pep.pdp.decision import Decision, Result


class TableRule(BaseModel):
    """One row of the rule table.

    Fields left as None match any value. subject_id matches the login-id
    attribute; an anonymous request has no login id and matches only rules
    whose subject_id is None or "".

    Attributes:
        id: Optional identifier for logs.
        subject_id: Exact login id.
        action_id: Exact action id.
        action_api: Exact action api (e.g. "API-A").
        context_index: Exact context index.
        resource_id: Exact resource id ("" targets unscoped requests).
        namespace: Exact resource namespace.
        decision: Decision returned when the rule matches.
    """

    id: str | None = None
    subject_id: str | None = None
    action_id: str | None = None
    action_api: str | None = None
    context_index: str | None = None
    resource_id: str | None = None
    namespace: str | None = None
    decision: Decision

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("decision", mode="before")
    @classmethod
    def reject_unknown_decision(cls, v: object) -> Decision:
        """Rule tables are authored, so an unknown decision is a typo, not a result."""
        decision = Decision.coerce(v)
        if decision is Decision.UNRECOGNIZED:
            raise ValueError(f"Unknown decision {v!r}; expected permit, deny, indeterminate or not_applicable")
        return decision

    def matches(self, request: Request) -> bool:
        """True if every non-None field equals the request's attribute value."""
        checks = (
            (self.subject_id, request.subject.value_of(SUBJECT_LOGIN_ID_URI) or ""),
            (self.action_id, request.action.value_of(ACTION_ID_URI)),
            (self.action_api, request.action.value_of(ACTION_API_URI)),
            (self.context_index, request.action.value_of(ACTION_CONTEXT_URI)),
            (self.resource_id, request.resource.value_of(RESOURCE_ID_URI)),
            (self.namespace, request.resource.value_of(RESOURCE_NAMESPACE_URI)),
        )
        return all(expected is None or expected == actual for expected, actual in checks)


class TableRuleFile(BaseModel):
    """Wrapper shape for rule table files written as {"rules": [...]}."""

    rules: list[TableRule]

    model_config = ConfigDict(frozen=True)


class TableDecisionEngine:
    """Decision engine that looks requests up in a fixed rule table.

    Immutable after construction, so concurrent evaluate() calls are safe.
    A new table means a new engine instance (see EngineHandle.reload()).
    """

    def __init__(
        self,
        rules: Sequence[TableRule] = (),
        default_decision: Decision = Decision.NOT_APPLICABLE,
    ) -> None:
        self._rules = tuple(rules)
        self._default_decision = default_decision

    @property
    def rules(self) -> tuple[TableRule, ...]:
        return self._rules

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    @property
    def default_decision(self) -> Decision:
        return self._default_decision

    def evaluate(self, request: Request) -> Result:
        resource_id = request.resource.value_of(RESOURCE_ID_URI)
        for rule in self._rules:
            if rule.matches(request):
                return Result(decision=rule.decision, resource_id=resource_id, status_message=rule.id)
        return Result(decision=self._default_decision, resource_id=resource_id)

    def __repr__(self) -> str:
        return f"TableDecisionEngine(rules={len(self._rules)}, default={self._default_decision.value})"
