"""
Create two assets and seed three classic liquidity pools with them.

A liquidity provider issues SAT1 and SAT2 to a recipient, which sends
part of the supply back. The provider then funds XLM/SAT1, XLM/SAT2 and
SAT1/SAT2 pools.
"""

import asyncio
from typing import Optional

from stellar_sdk import Asset

from stellar_workshop import narration
from stellar_workshop.config import Settings
from stellar_workshop.models.result import StepResult, WorkflowReport
from stellar_workshop.steps.accounts import create_wallet, fund_wallets, load_balances
from stellar_workshop.steps.issuance import (
    create_trustlines,
    define_asset,
    issue_asset,
    transfer,
)
from stellar_workshop.steps.liquidity import (
    POOL_FEE_BPS,
    create_pool_trustlines,
    deposit_liquidity,
    pool_asset,
)
from stellar_workshop.workflows.runner import Clients, main as run_main

NAME = "Horizon liquidity pools"

MIN_PRICE = "0.0001"
MAX_PRICE = "10000"

ISSUED_SAT1 = "10000000"
ISSUED_SAT2 = "15000000"
RETURNED_SAT1 = "6000000"
RETURNED_SAT2 = "10000000"

# (first asset, second asset, first amount, second amount)
# SAT1 is worth 4000/5M = 0.0008 XLM and SAT2 4000/8M = 0.0005 XLM, so
# SAT1:SAT2 is about 1.6:1, hence 800k SAT1 against 500k SAT2.
DEPOSITS = (
    ("XLM", "SAT1", "4000", "5000000"),
    ("XLM", "SAT2", "4000", "8000000"),
    ("SAT1", "SAT2", "800000", "500000"),
)


async def run(
    clients: Clients,
    settings: Settings,
    cancel: Optional[asyncio.Event] = None,
) -> WorkflowReport:
    ledger = clients.ledger
    report = WorkflowReport(name=NAME)

    narration.title("Creating Assets and Liquidity Pools")

    narration.step(1, "Creating and Funding Wallets")
    provider = create_wallet("Liquidity Provider")
    recipient = create_wallet("Recipient")
    for wallet in (provider, recipient):
        narration.wallet(wallet, show_secret=True)
    await fund_wallets(ledger, [provider, recipient])
    narration.done("Wallets funded")
    narration.balances(provider.name, load_balances(ledger, provider))
    report.record(StepResult.confirmed("Created and funded 2 wallets"))

    assets = {
        "XLM": Asset.native(),
        "SAT1": define_asset("SAT1", provider),
        "SAT2": define_asset("SAT2", provider),
    }
    sat1, sat2 = assets["SAT1"], assets["SAT2"]

    narration.step(2, "Creating Trustlines and Issuing Assets")
    tx_hash = create_trustlines(ledger, recipient, [sat1, sat2])
    narration.done("Recipient trustlines created")
    report.record(StepResult.confirmed("Recipient trusts SAT1 and SAT2", tx_hash))

    tx_hash = issue_asset(
        ledger,
        provider,
        recipient.public_key,
        [(sat1, ISSUED_SAT1), (sat2, ISSUED_SAT2)],
    )
    narration.done(f"Issued {ISSUED_SAT1} SAT1 and {ISSUED_SAT2} SAT2")
    report.record(StepResult.confirmed("Issued SAT1 and SAT2", tx_hash))

    # The provider is the issuer, so it needs no trustline to receive these
    tx_hash = transfer(
        ledger,
        recipient,
        provider.public_key,
        [(sat1, RETURNED_SAT1), (sat2, RETURNED_SAT2)],
        "Return tokens to provider",
    )
    narration.done("Tokens transferred to Liquidity Provider")
    report.record(StepResult.confirmed("Returned tokens to provider", tx_hash))
    narration.balances(provider.name, load_balances(ledger, provider))

    narration.step(3, "Creating Liquidity Pools")
    pools = {}
    for first, second, _, _ in DEPOSITS:
        pool = pool_asset(assets[first], assets[second], POOL_FEE_BPS)
        pools[(first, second)] = pool
        narration.info(f"{first}/{second} Pool ID: {pool.liquidity_pool_id}")
    tx_hash = create_pool_trustlines(ledger, provider, list(pools.values()))
    narration.done("Pool trustlines created")
    report.record(StepResult.confirmed("Created 3 pool trustlines", tx_hash))

    narration.step(4, "Depositing Liquidity to Pools")
    for first, second, amount_first, amount_second in DEPOSITS:
        tx_hash = deposit_liquidity(
            ledger,
            provider,
            assets[first],
            amount_first,
            assets[second],
            amount_second,
            min_price=MIN_PRICE,
            max_price=MAX_PRICE,
        )
        narration.done(f"{first}/{second} pool liquidity deposited")
        report.record(
            StepResult.confirmed(
                f"{first}/{second} pool",
                tx_hash,
                detail=f"{amount_first} {first} + {amount_second} {second}",
            )
        )
        report.addresses[f"{first}/{second} Pool"] = pools[(first, second)].liquidity_pool_id

    narration.balances(f"Final {provider.name}", load_balances(ledger, provider))

    report.addresses["Liquidity Provider"] = provider.public_key
    narration.summary(report)
    return report


def main() -> int:
    return run_main(NAME, run)


if __name__ == "__main__":
    raise SystemExit(main())
