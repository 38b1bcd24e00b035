from dataclasses import dataclass, field
from typing import List


@dataclass
class AllocationResult:
    allocated_ids: List[str]
    narrative_lines: List[str] = field(default_factory=list)
    strategy: str = "deterministic"
    used_fallback: bool = False

    @property
    def narrative(self) -> str:
        return "\n".join(self.narrative_lines)

    def to_response(self) -> dict:
        """JSON body returned by the allocation endpoint."""
        return {
            "allocations": list(self.allocated_ids),
            "reasoning": self.narrative,
            "strategy": self.strategy,
            "usedFallback": self.used_fallback,
        }
