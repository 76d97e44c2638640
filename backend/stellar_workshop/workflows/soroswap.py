"""
Soroswap workshop: from a classic asset to trading on Soroban.

1. Create and fund wallets (Asset Creator, Token Holder, Trader)
2. Create the RIO asset and issue it to the Token Holder
3. Deploy RIO to Soroban as a Stellar Asset Contract
4. Add XLM/RIO liquidity through the Soroswap API
5. Swap XLM for RIO with quote, build, sign and submit
"""

import asyncio
from typing import Optional

from stellar_sdk import Asset

from stellar_workshop import narration
from stellar_workshop.config import Settings
from stellar_workshop.models.result import StepResult, WorkflowReport
from stellar_workshop.steps.accounts import create_wallet, fund_wallets, load_balances
from stellar_workshop.steps.contracts import asset_contract_id, deploy_asset_contract
from stellar_workshop.steps.issuance import create_trustlines, define_asset, issue_asset
from stellar_workshop.steps.trading import add_liquidity, swap_exact_in, to_stroops
from stellar_workshop.workflows.runner import Clients, main as run_main, poll_policy

NAME = "Soroswap workshop"

ASSET_CODE = "RIO"
HOLDER_TRUST_LIMIT = "10000000"
TOKEN_SUPPLY = "2000000"

# Initial rate: 1 XLM = 125 RIO
LIQUIDITY_XLM = 8000
LIQUIDITY_RIO = 1000000
SLIPPAGE_BPS = 500  # 5%

TRADER_TRUST_LIMIT = "1000000"
SWAP_AMOUNT_XLM = 500

LEARNING_POINTS = (
    "Stellar assets can be deployed to Soroban as smart contracts",
    "The Soroswap API builds liquidity and trade transactions to sign locally",
    "Quote -> Build -> Sign -> Submit workflow for trading",
    "Liquidity provision enables decentralized trading",
)


async def run(
    clients: Clients,
    settings: Settings,
    cancel: Optional[asyncio.Event] = None,
) -> WorkflowReport:
    ledger, network = clients.ledger, clients.network
    policy = poll_policy(settings)
    report = WorkflowReport(name=NAME)

    narration.title("Starting Soroswap Workshop")

    narration.step(1, "Creating Wallets")
    creator = create_wallet("Asset Creator")
    holder = create_wallet("Token Holder")
    trader = create_wallet("Trader")
    for wallet in (creator, holder, trader):
        narration.wallet(wallet)

    narration.step(2, "Funding Wallets with Testnet XLM")
    await fund_wallets(ledger, [creator, holder, trader])
    narration.done("All wallets funded")
    report.record(StepResult.confirmed("Created and funded 3 wallets"))

    narration.step(3, f"Creating and Issuing {ASSET_CODE} Token")
    rio = define_asset(ASSET_CODE, creator)
    narration.info(f"{ASSET_CODE} Asset: {rio.code}:{rio.issuer}")
    create_trustlines(ledger, holder, [rio], limit=HOLDER_TRUST_LIMIT)
    narration.done("Trustline created")
    tx_hash = issue_asset(ledger, creator, holder.public_key, [(rio, TOKEN_SUPPLY)])
    narration.done(f"Issued {TOKEN_SUPPLY} {ASSET_CODE} to Token Holder")
    report.record(StepResult.confirmed(f"Created and issued {ASSET_CODE}", tx_hash))

    narration.step(4, f"Deploying {ASSET_CODE} Asset to Soroban")
    rio_contract = await deploy_asset_contract(
        ledger, network, holder, rio, policy=policy, cancel=cancel
    )
    xlm_contract = asset_contract_id(Asset.native(), network.network_passphrase)
    narration.done(f"{ASSET_CODE} Contract ID: {rio_contract}")
    narration.info(f"XLM Contract ID: {xlm_contract}")
    report.record(StepResult.confirmed(f"Deployed {ASSET_CODE} to Soroban", detail=rio_contract))

    narration.step(5, "Adding Liquidity using Soroswap")
    narration.info(f"{LIQUIDITY_XLM} XLM + {LIQUIDITY_RIO} {ASSET_CODE}")
    result = report.record(
        await add_liquidity(
            clients.soroswap,
            network,
            holder,
            asset_a=xlm_contract,
            asset_b=rio_contract,
            amount_a=to_stroops(LIQUIDITY_XLM),
            amount_b=to_stroops(LIQUIDITY_RIO),
            slippage_bps=SLIPPAGE_BPS,
            policy=policy,
            cancel=cancel,
        )
    )
    narration.outcome(result)

    await narration.countdown(
        settings.observe_pause_seconds,
        "Observing liquidity pool status - next step in",
    )

    narration.step(6, f"Trader Creates Trustline to {ASSET_CODE}")
    tx_hash = create_trustlines(ledger, trader, [rio], limit=TRADER_TRUST_LIMIT)
    narration.done(f"Trader trustline to {ASSET_CODE} created")
    report.record(StepResult.confirmed(f"Trader trusts {ASSET_CODE}", tx_hash))

    narration.step(7, "Trading using Soroswap")
    narration.info(f"Sending {SWAP_AMOUNT_XLM} XLM, receiving {ASSET_CODE} at market rate")
    result = report.record(
        await swap_exact_in(
            clients.soroswap,
            network,
            trader,
            asset_in=xlm_contract,
            asset_out=rio_contract,
            amount=to_stroops(SWAP_AMOUNT_XLM),
            slippage_bps=SLIPPAGE_BPS,
            policy=policy,
            cancel=cancel,
        )
    )
    narration.outcome(result)

    narration.step(8, "Final Balances")
    narration.balances(trader.name, load_balances(ledger, trader))
    narration.balances(holder.name, load_balances(ledger, holder))

    report.addresses.update({
        f"{ASSET_CODE} Asset": f"{rio.code}:{rio.issuer}",
        f"{ASSET_CODE} Contract ID": rio_contract,
        "XLM Contract ID": xlm_contract,
        "Token Holder": holder.public_key,
        "Trader": trader.public_key,
    })
    narration.summary(report, LEARNING_POINTS)
    return report


def main() -> int:
    return run_main(NAME, run)


if __name__ == "__main__":
    raise SystemExit(main())
