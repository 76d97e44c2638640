from stellar_workshop.models.wallet import Wallet
from stellar_workshop.models.balance import BalanceLine, balance_of
from stellar_workshop.models.result import StepOutcome, StepResult, WorkflowReport

__all__ = [
    "Wallet",
    "BalanceLine",
    "balance_of",
    "StepOutcome",
    "StepResult",
    "WorkflowReport",
]
