"""Console narration for the workshop runs. Human-readable only."""

import asyncio
from typing import Iterable, Sequence

from stellar_workshop.exceptions import describe_error
from stellar_workshop.models.balance import BalanceLine
from stellar_workshop.models.result import StepOutcome, StepResult, WorkflowReport
from stellar_workshop.models.wallet import Wallet

WIDTH = 60

_OUTCOME_TAGS = {
    StepOutcome.CONFIRMED: "[OK]",
    StepOutcome.SIMULATED: "[SIMULATED]",
    StepOutcome.FAILED: "[FAILED]",
}


def title(text: str) -> None:
    print("=" * WIDTH)
    print(text)
    print("=" * WIDTH)


def step(number: int, text: str) -> None:
    print(f"\n--- STEP {number}: {text} ---")


def info(text: str) -> None:
    print(f"  {text}")


def done(text: str) -> None:
    print(f"  [OK] {text}")


def wallet(created: Wallet, show_secret: bool = False) -> None:
    print(f"  {created.name}: {created.public_key}")
    if show_secret:
        print(f"    Secret: {created.secret}")


def balances(label: str, lines: Iterable[BalanceLine]) -> None:
    print(f"\n  {label} balances:")
    for line in lines:
        print(f"    {line.balance} {line.label}")


def summary(
    report: WorkflowReport,
    learning_points: Sequence[str] = (),
) -> None:
    """Print every step's outcome, the important addresses and notes."""
    print(f"\n{'=' * WIDTH}")
    print(f"{report.name.upper()} SUMMARY")
    print("=" * WIDTH)

    print("\nSteps:")
    for number, result in enumerate(report.steps, start=1):
        line = f"  {number}. {_OUTCOME_TAGS[result.outcome]} {result.step}"
        if result.detail:
            line += f": {result.detail}"
        print(line)
        if result.error:
            print(f"       {result.error}")

    if report.addresses:
        print("\nImportant addresses:")
        for label, value in report.addresses.items():
            print(f"  {label}: {value}")

    if learning_points:
        print("\nKey points:")
        for point in learning_points:
            print(f"  - {point}")

    print("=" * WIDTH)


def failure(name: str, error: BaseException) -> None:
    print(f"\n[ERROR] {name} stopped: {describe_error(error)}")


async def countdown(seconds: int, message: str = "Next step in") -> None:
    """Count down on one console line, one second per tick."""
    if seconds <= 0:
        return
    print(f"\n  {message}:")
    for remaining in range(seconds, 0, -1):
        minutes, secs = divmod(remaining, 60)
        clock = f"{minutes}:{secs:02d}" if minutes else f"{secs}"
        print(f"\r  {clock} seconds remaining...", end="", flush=True)
        await asyncio.sleep(1)
    print("\n  Ready to proceed!")


def outcome(result: StepResult) -> None:
    """Print a step result as it happened."""
    line = f"  {_OUTCOME_TAGS[result.outcome]} {result.step}"
    if result.detail:
        line += f": {result.detail}"
    print(line)
    if result.tx_hash:
        print(f"    Transaction: {result.tx_hash}")
    if result.error:
        print(f"    Error: {result.error}")
