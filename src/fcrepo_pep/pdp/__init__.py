"""Policy Decision Point (PDP) side of enforcement.

The PEP treats the decision engine as opaque: anything implementing
DecisionEngineProtocol can be plugged in. This package provides the
protocol, the Decision/Result vocabulary, the deny-biased combiner, and
a reference table engine so the PEP runs end-to-end.

Structure:
    decision.py       - Decision enum and Result model
    protocol.py       - DecisionEngineProtocol, EngineFactory
    combiner.py       - tally() / combine() / combine_batch() (deny-biased)
    table.py          - TableDecisionEngine (exact-match reference engine)
    timeout.py        - TimeoutDecisionEngine adapter
    factory.py        - build_engine() from EngineConfig
"""

from fcrepo_pep.pdp.combiner import BatchDecision, DecisionTally, combine, combine_batch, tally
from fcrepo_pep.pdp.decision import Decision, Result
from fcrepo_pep.pdp.factory import build_engine, load_rule_table
from fcrepo_pep.pdp.protocol import DecisionEngineProtocol, EngineFactory
from fcrepo_pep.pdp.table import TableDecisionEngine, TableRule
from fcrepo_pep.pdp.timeout import TimeoutDecisionEngine

__all__ = [
    # Decision
    "Decision",
    "Result",
    # Combining
    "BatchDecision",
    "DecisionTally",
    "combine",
    "combine_batch",
    "tally",
    # Engines
    "DecisionEngineProtocol",
    "EngineFactory",
    "TableDecisionEngine",
    "TableRule",
    "TimeoutDecisionEngine",
    "build_engine",
    "load_rule_table",
]
