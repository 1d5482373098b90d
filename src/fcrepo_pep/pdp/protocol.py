"""Protocol definition for pluggable decision engines.

Any object with an evaluate(request) -> Result method is a decision engine:
the built-in table engine, a remote engine client, or a test stub.
Engines implement this protocol without inheriting from our code
(structural subtyping).

Example adapter:

    class RemotePdpEngine:
        def evaluate(self, request: Request) -> Result:
            response = self._client.post("/evaluate", json=request.model_dump())
            return Result(decision=response.json()["decision"])
"""

from __future__ import annotations

__all__ = [
    "DecisionEngineProtocol",
    "EngineFactory",
]

from typing import TYPE_CHECKING, Callable, Collection, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fcrepo_pep.config import EngineConfig
    from fcrepo_pep.context.attributes import Request
    from fcrepo_pep.pdp.decision import Result


@runtime_checkable
class DecisionEngineProtocol(Protocol):
    """Protocol for pluggable decision engines (PDPs).

    Thread-safety:
    - evaluate() must be safe for concurrent calls; the PEP never
      serializes evaluations.

    Timeouts and retries are the engine's concern. An evaluation that
    cannot complete should return an INDETERMINATE Result rather than hang.
    """

    def evaluate(self, request: "Request") -> "Result | Collection[Result]":
        """Evaluate one request against current policy.

        Args:
            request: Request with one subject, action and resource set.

        Returns:
            A Result, or a collection of Results, each with one of the
            five Decision kinds.
        """
        ...


# Builds a fresh engine from an immutable configuration
EngineFactory = Callable[["EngineConfig"], DecisionEngineProtocol]
