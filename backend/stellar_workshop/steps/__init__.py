from stellar_workshop.steps.accounts import create_wallet, fund_wallets, load_balances
from stellar_workshop.steps.issuance import (
    create_trustlines,
    define_asset,
    issue_asset,
    lock_issuer,
    transfer,
)
from stellar_workshop.steps.liquidity import (
    POOL_FEE_BPS,
    canonical_pair,
    create_pool_trustlines,
    deposit_liquidity,
    pool_asset,
    pool_id,
    swap_path_payment,
)
from stellar_workshop.steps.contracts import asset_contract_id, deploy_asset_contract
from stellar_workshop.steps.trading import (
    add_liquidity,
    from_stroops,
    swap_exact_in,
    to_stroops,
)

__all__ = [
    "create_wallet",
    "fund_wallets",
    "load_balances",
    "create_trustlines",
    "define_asset",
    "issue_asset",
    "lock_issuer",
    "transfer",
    "POOL_FEE_BPS",
    "canonical_pair",
    "create_pool_trustlines",
    "deposit_liquidity",
    "pool_asset",
    "pool_id",
    "swap_path_payment",
    "asset_contract_id",
    "deploy_asset_contract",
    "add_liquidity",
    "from_stroops",
    "swap_exact_in",
    "to_stroops",
]
