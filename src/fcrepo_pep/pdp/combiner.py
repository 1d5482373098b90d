"""Deny-biased decision combining.

Reduces a set of Results to a single boolean. The set is authorized only when:

    permits >= 1 and denies == 0 and indeterminates == 0 and unrecognized == 0

NotApplicable results neither grant nor block. An empty set has no permit
and is therefore denied: "nothing evaluated" never means "nothing to deny".

For an enforcement call covering several resources, combine_batch()
applies the rule to each resource's Results and authorizes the batch only
when every resource passes.
"""

from __future__ import annotations

__all__ = [
    "BatchDecision",
    "DecisionTally",
    "combine",
    "combine_batch",
    "tally",
]

from dataclasses import dataclass
from typing import Any, Iterable, Literal

from fcrepo_pep.pdp.decision import Decision, Result
from fcrepo_pep.telemetry.system import get_system_logger

_system_logger = get_system_logger()

TallyReason = Literal["permit", "deny", "indeterminate", "unrecognized", "no_permit"]


@dataclass(frozen=True, slots=True)
class DecisionTally:
    """Per-decision counts for one batch of Results.

    Attributes:
        permits: Explicit permits.
        denies: Explicit denies.
        indeterminates: Targets matched but evaluation failed.
        not_applicables: No policy targeted the request.
        unrecognized: Anything else; should not happen with a sane engine.
    """

    permits: int = 0
    denies: int = 0
    indeterminates: int = 0
    not_applicables: int = 0
    unrecognized: int = 0

    @property
    def permitted(self) -> bool:
        """True if the batch as a whole is authorized."""
        return self.permits >= 1 and self.denies == 0 and self.indeterminates == 0 and self.unrecognized == 0

    @property
    def total(self) -> int:
        return self.permits + self.denies + self.indeterminates + self.not_applicables + self.unrecognized

    @property
    def reason(self) -> TallyReason:
        """Why the batch was (not) authorized, strongest cause first."""
        if self.denies:
            return "deny"
        if self.indeterminates:
            return "indeterminate"
        if self.unrecognized:
            return "unrecognized"
        if not self.permits:
            return "no_permit"
        return "permit"

    def as_dict(self) -> dict[str, int]:
        return {
            "permits": self.permits,
            "denies": self.denies,
            "indeterminates": self.indeterminates,
            "not_applicables": self.not_applicables,
            "unrecognized": self.unrecognized,
        }


def _decision_of(result: Any) -> Decision:
    if isinstance(result, Result):
        return result.decision
    # Foreign objects from a misbehaving engine
    return Decision.coerce(getattr(result, "decision", None))


def tally(results: Iterable[Result]) -> DecisionTally:
    """Count each Result's decision into one of five buckets."""
    permits = denies = indeterminates = not_applicables = unrecognized = 0
    for result in results:
        decision = _decision_of(result)
        if decision is Decision.PERMIT:
            permits += 1
        elif decision is Decision.DENY:
            denies += 1
        elif decision is Decision.INDETERMINATE:
            indeterminates += 1
        elif decision is Decision.NOT_APPLICABLE:
            not_applicables += 1
        else:
            unrecognized += 1

    counts = DecisionTally(
        permits=permits,
        denies=denies,
        indeterminates=indeterminates,
        not_applicables=not_applicables,
        unrecognized=unrecognized,
    )
    _system_logger.debug({"event": "decision_tally", "message": f"AUTHZ: {counts.as_dict()}", **counts.as_dict()})
    return counts


def combine(results: Iterable[Result]) -> bool:
    """Reduce Results to one enforcement outcome (deny-biased).

    Args:
        results: Results to combine.

    Returns:
        True only if there is at least one permit and no deny,
        indeterminate or unrecognized result.
    """
    return tally(results).permitted


@dataclass(frozen=True, slots=True)
class BatchDecision:
    """Combined outcome of a multi-resource enforcement call.

    Attributes:
        permitted: True only if every resource was individually permitted.
        tally: Counts across all resources.
        resource_tallies: Counts per resource, in request order.
    """

    permitted: bool
    tally: DecisionTally
    resource_tallies: tuple[DecisionTally, ...]

    @property
    def reason(self) -> TallyReason:
        if self.permitted:
            return "permit"
        reason = self.tally.reason
        # Permits elsewhere in the batch do not cover a resource without one
        return "no_permit" if reason == "permit" else reason


def combine_batch(per_resource: Iterable[Iterable[Result]]) -> BatchDecision:
    """Combine the Results of a batch, one group of Results per resource.

    Each resource must pass combine() on its own; NotApplicable for one
    resource is not rescued by a Permit for another. An empty batch is denied.
    """
    resource_tallies = tuple(tally(results) for results in per_resource)
    overall = DecisionTally(
        permits=sum(t.permits for t in resource_tallies),
        denies=sum(t.denies for t in resource_tallies),
        indeterminates=sum(t.indeterminates for t in resource_tallies),
        not_applicables=sum(t.not_applicables for t in resource_tallies),
        unrecognized=sum(t.unrecognized for t in resource_tallies),
    )
    permitted = bool(resource_tallies) and all(t.permitted for t in resource_tallies)
    return BatchDecision(permitted=permitted, tally=overall, resource_tallies=resource_tallies)
