"""Engine handle - the swappable reference to the active decision engine.

Lifecycle:
    Uninitialized --initialize--> Active --reload--> Active --teardown--> Destroyed
                                         (atomic swap)

Concurrency:
- The engine reference is the only shared mutable state.
- A lock is held only to read or write the reference, never while an
  engine is being built or while a request is being evaluated.
- New engines are fully built before the swap, so no caller can observe
  a partially constructed engine.
- Callers that captured the previous engine finish against it; calls
  starting after the swap see the new one.
"""

from __future__ import annotations

__all__ = [
    "EngineHandle",
    "EngineSnapshot",
]

import threading
from typing import TYPE_CHECKING, Collection, NamedTuple

from fcrepo_pep.exceptions import EngineUnavailableError
from fcrepo_pep.pdp.factory import build_engine
from fcrepo_pep.telemetry.system import get_system_logger

if TYPE_CHECKING:
    from fcrepo_pep.config import EngineConfig
    from fcrepo_pep.context.attributes import Request
    from fcrepo_pep.pdp.decision import Result
    from fcrepo_pep.pdp.protocol import DecisionEngineProtocol, EngineFactory

_system_logger = get_system_logger()


class EngineSnapshot(NamedTuple):
    """An engine captured from the handle, with the generation it belongs to."""

    engine: "DecisionEngineProtocol"
    generation: int


class EngineHandle:
    """Holds the currently active decision engine and the config it came from.

    Thread-safe. evaluate() and acquire() may be called from any number of
    threads while initialize(), reload() or teardown() run.
    """

    def __init__(self, engine_factory: "EngineFactory | None" = None) -> None:
        """Create an uninitialized handle.

        Args:
            engine_factory: Builds an engine from EngineConfig.
                Defaults to build_engine().
        """
        self._engine_factory = engine_factory or build_engine
        self._config: "EngineConfig | None" = None
        self._engine: "DecisionEngineProtocol | None" = None
        self._generation = 0

        # Guards _config, _engine and _generation. Never held during build or evaluate.
        self._lock = threading.Lock()
        # Serializes builds so concurrent reloads swap in order
        self._build_lock = threading.Lock()

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._engine is not None

    @property
    def generation(self) -> int:
        """Number of engines built and activated so far."""
        with self._lock:
            return self._generation

    @property
    def config(self) -> "EngineConfig | None":
        with self._lock:
            return self._config

    def initialize(self, config: "EngineConfig") -> int:
        """Store config, build the first engine and activate it.

        Calling again replaces the stored config and behaves like reload().

        Returns:
            The generation number of the activated engine.

        Raises:
            Exception: Whatever the engine factory raises; the handle is
                left unchanged.
        """
        return self._build_and_swap(config, event="engine_initialized")

    def reload(self) -> int:
        """Build a new engine from the stored config and swap it in.

        On build failure the previous engine stays active (last known good)
        and the error propagates.

        Returns:
            The generation number of the activated engine.

        Raises:
            EngineUnavailableError: If the handle was never initialized or
                has been torn down.
        """
        with self._lock:
            config = self._config
            active = self._engine is not None
        if config is None or not active:
            raise EngineUnavailableError("Decision engine is not active; initialize it before reloading")
        return self._build_and_swap(config, event="engine_reloaded", require_active=True)

    def teardown(self) -> None:
        """Clear the active engine. Later evaluations fail with EngineUnavailableError.

        Calls that already captured the engine are allowed to finish.
        """
        with self._lock:
            was_active = self._engine is not None
            self._engine = None
        if was_active:
            _system_logger.info({"event": "engine_torn_down", "message": "Decision engine deactivated"})

    def snapshot(self) -> EngineSnapshot:
        """Capture the active engine together with its generation.

        Raises:
            EngineUnavailableError: If no engine is active.
        """
        with self._lock:
            engine = self._engine
            generation = self._generation
        if engine is None:
            raise EngineUnavailableError("Decision engine is not active")
        return EngineSnapshot(engine=engine, generation=generation)

    def acquire(self) -> "DecisionEngineProtocol":
        """Return the currently active engine.

        Used to evaluate a whole batch against one engine instance.

        Raises:
            EngineUnavailableError: If no engine is active.
        """
        return self.snapshot().engine

    def evaluate(self, request: "Request") -> "Result | Collection[Result]":
        """Evaluate one request against the currently active engine.

        The engine reference is captured under the lock; evaluation runs
        outside it.

        Raises:
            EngineUnavailableError: If no engine is active.
        """
        return self.acquire().evaluate(request)

    def _build_and_swap(self, config: "EngineConfig", *, event: str, require_active: bool = False) -> int:
        with self._build_lock:
            try:
                engine = self._engine_factory(config)
            except Exception as e:
                _system_logger.error(
                    {
                        "event": "engine_build_failed",
                        "message": f"Decision engine build failed: {e}",
                        "error_type": type(e).__name__,
                        "error": str(e),
                    }
                )
                raise

            with self._lock:
                # A teardown that raced this reload wins
                if require_active and self._engine is None:
                    raise EngineUnavailableError("Decision engine was deactivated during reload")
                self._config = config
                self._engine = engine
                self._generation += 1
                generation = self._generation

        _system_logger.info(
            {
                "event": event,
                "message": f"Decision engine activated (generation {generation})",
                "generation": generation,
                "engine": repr(engine),
            }
        )
        return generation
