from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class StepOutcome(Enum):
    """How a workflow step ended."""

    CONFIRMED = "confirmed"  # Terminal success observed on the network
    SIMULATED = "simulated"  # Deliberately not executed (e.g. no API key)
    FAILED = "failed"  # Error raised by the service or the network


@dataclass
class StepResult:
    """Result of one workflow step."""

    step: str
    outcome: StepOutcome
    tx_hash: Optional[str] = None
    detail: Optional[str] = None
    error: Optional[str] = None

    @staticmethod
    def confirmed(
        step: str,
        tx_hash: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> "StepResult":
        return StepResult(step=step, outcome=StepOutcome.CONFIRMED, tx_hash=tx_hash, detail=detail)

    @staticmethod
    def simulated(step: str, detail: str) -> "StepResult":
        return StepResult(step=step, outcome=StepOutcome.SIMULATED, detail=detail)

    @staticmethod
    def failed(step: str, error: str, tx_hash: Optional[str] = None) -> "StepResult":
        return StepResult(step=step, outcome=StepOutcome.FAILED, tx_hash=tx_hash, error=error)

    @property
    def is_confirmed(self) -> bool:
        return self.outcome == StepOutcome.CONFIRMED


@dataclass
class WorkflowReport:
    """
    Everything a workflow run produced.

    Steps are kept in execution order; addresses maps labels such as
    "RIO Asset" or "Trader" to the values printed in the summary.
    """

    name: str
    steps: list[StepResult] = field(default_factory=list)
    addresses: dict[str, str] = field(default_factory=dict)

    def record(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    def get(self, step: str) -> Optional[StepResult]:
        for result in self.steps:
            if result.step == step:
                return result
        return None

    @property
    def all_confirmed(self) -> bool:
        return all(result.is_confirmed for result in self.steps)
