"""Interchangeable allocation strategies selected by the rule config.

Every strategy honours the same contract as ``allocation_engine.allocate``:
validated input in, ``AllocationResult`` out. Invalid input raises
``InvalidInputError`` before any work; the language model strategy adds
``UpstreamUnavailableError`` for anything that goes wrong upstream.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from models.facility import FacilityRecord
from models.allocation import AllocationResult
from engine import allocation_engine, language_model
from engine.errors import UpstreamUnavailableError
from engine.explainer import explain_empty
from config.defaults import ALLOCATION_STRATEGY, ALLOCATION_STRATEGIES, LLM_FALLBACK_TO_DETERMINISTIC

logger = logging.getLogger(__name__)


class AllocationStrategy(ABC):
    name = "base"

    @abstractmethod
    def allocate(self, records: Sequence[FacilityRecord], available_ambulances: int) -> AllocationResult:
        ...


class DeterministicStrategy(AllocationStrategy):
    name = "deterministic"

    def allocate(self, records, available_ambulances):
        return allocation_engine.allocate(records, available_ambulances)


class LanguageModelStrategy(AllocationStrategy):
    """Delegates ranking to an external language model. Best effort, non-deterministic."""

    name = "language_model"

    def __init__(self, rule_config: Optional[dict] = None, client=None):
        self.rule_config = rule_config or {}
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = language_model.create_client(self.rule_config)
        return self._client

    def allocate(self, records, available_ambulances):
        budget = allocation_engine.validate_allocation_request(records, available_ambulances)
        if not records:
            return AllocationResult(
                allocated_ids=[],
                narrative_lines=explain_empty(budget),
                strategy=self.name,
            )

        raw = language_model.request_allocation(self.client, records, budget, self.rule_config)
        allocated_ids, reasoning = language_model.parse_allocation_arguments(raw, records, budget)
        logger.info("Language model allocated %d of %d ambulances", len(allocated_ids), budget)
        return AllocationResult(
            allocated_ids=allocated_ids,
            narrative_lines=reasoning.splitlines() or [reasoning],
            strategy=self.name,
        )


class FallbackStrategy(AllocationStrategy):
    """Runs the primary strategy, serving the deterministic engine when upstream is unavailable."""

    def __init__(self, primary: AllocationStrategy, fallback: Optional[AllocationStrategy] = None):
        self.primary = primary
        self.fallback = fallback or DeterministicStrategy()
        self.name = primary.name

    def allocate(self, records, available_ambulances):
        try:
            return self.primary.allocate(records, available_ambulances)
        except UpstreamUnavailableError as e:
            logger.warning(
                "%s strategy unavailable (%s); serving %s result",
                self.primary.name, e.message, self.fallback.name,
            )
            result = self.fallback.allocate(records, available_ambulances)
            note = f"Note: {self.primary.name} allocation unavailable ({e.message}); {self.fallback.name} ranking used."
            result.narrative_lines = [note, ""] + result.narrative_lines
            result.used_fallback = True
            return result


def get_strategy(rule_config: Optional[dict] = None, client=None) -> AllocationStrategy:
    """Build the strategy named by ``allocation_strategy`` in the rule config."""
    cfg = rule_config or {}
    name = cfg.get("allocation_strategy", ALLOCATION_STRATEGY)
    if name not in ALLOCATION_STRATEGIES:
        raise ValueError(
            f"Unknown allocation strategy: {name!r}. Expected one of: {', '.join(ALLOCATION_STRATEGIES)}"
        )

    if name == "deterministic":
        return DeterministicStrategy()

    strategy = LanguageModelStrategy(cfg, client=client)
    if cfg.get("llm_fallback_to_deterministic", LLM_FALLBACK_TO_DETERMINISTIC):
        return FallbackStrategy(strategy)
    return strategy
