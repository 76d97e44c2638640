"""Deploying classic assets to Soroban as Stellar Asset Contracts."""

import asyncio
import logging
from typing import Optional

from stellar_sdk import Asset

from stellar_workshop.blockchain.polling import PollPolicy, wait_for_transaction
from stellar_workshop.blockchain.protocols import ContractNetwork, LedgerClient
from stellar_workshop.blockchain.transaction import TX_TIMEOUT, new_transaction
from stellar_workshop.config import BASE_FEE
from stellar_workshop.models.wallet import Wallet

logger = logging.getLogger(__name__)


def asset_contract_id(asset: Asset, network_passphrase: str) -> str:
    """
    Contract address of an asset's Stellar Asset Contract.

    Derived from the network id and the asset alone, so it is known
    before deployment and is the same for every deployer.
    """
    return asset.contract_id(network_passphrase)


async def deploy_asset_contract(
    ledger: LedgerClient,
    network: ContractNetwork,
    deployer: Wallet,
    asset: Asset,
    policy: PollPolicy = PollPolicy(),
    cancel: Optional[asyncio.Event] = None,
    base_fee: int = BASE_FEE,
) -> str:
    """
    Deploy the Stellar Asset Contract for a classic asset.

    Any funded account may deploy it. The transaction is simulated and
    prepared by the RPC, signed by the deployer, sent, and polled until
    it succeeds or fails.

    Returns:
        The contract address
    """
    contract_id = asset_contract_id(asset, network.network_passphrase)
    logger.info(f"Deploying {asset.code} asset contract, predicted id {contract_id}")

    builder = new_transaction(ledger, deployer.public_key, base_fee)
    builder.append_create_stellar_asset_contract_from_asset_op(
        asset=asset,
        source=deployer.public_key,
    )
    envelope = builder.set_timeout(TX_TIMEOUT).build()

    envelope = network.prepare_transaction(envelope)
    envelope.sign(deployer.keypair)

    description = f"{asset.code} contract deploy"
    tx_hash = network.send_transaction(envelope, description)
    await wait_for_transaction(network, tx_hash, policy, cancel, description)

    logger.info(f"{asset.code} deployed to Soroban: {contract_id}")
    return contract_id
