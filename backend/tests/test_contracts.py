import pytest
from stellar_sdk import Asset, Network

from stellar_workshop.blockchain.mock import MockLedger, MockSorobanNetwork
from stellar_workshop.blockchain.polling import PollPolicy
from stellar_workshop.blockchain.protocols import TransactionStatus
from stellar_workshop.exceptions import TransactionFailedError
from stellar_workshop.models.wallet import Wallet
from stellar_workshop.steps.contracts import asset_contract_id, deploy_asset_contract

FAST = PollPolicy(initial_delay=0.0, max_delay=0.0, timeout=5.0)


@pytest.fixture
def deployer(ledger: MockLedger) -> Wallet:
    wallet = Wallet.create("Token Holder")
    ledger.create_account(wallet.public_key)
    return wallet


@pytest.fixture
def rio() -> Asset:
    return Asset("RIO", Wallet.create("Asset Creator").public_key)


class TestAssetContractId:
    """Tests for contract address derivation."""

    def test_contract_address(self, rio: Asset):
        contract_id = asset_contract_id(rio, Network.TESTNET_NETWORK_PASSPHRASE)

        assert contract_id.startswith("C")
        assert contract_id == asset_contract_id(rio, Network.TESTNET_NETWORK_PASSPHRASE)

    def test_depends_on_network(self, rio: Asset):
        assert asset_contract_id(rio, Network.TESTNET_NETWORK_PASSPHRASE) != asset_contract_id(
            rio, Network.PUBLIC_NETWORK_PASSPHRASE
        )

    def test_native_contract(self):
        native = asset_contract_id(Asset.native(), Network.TESTNET_NETWORK_PASSPHRASE)

        assert native.startswith("C")


class TestDeployAssetContract:
    """Tests for deploying a Stellar Asset Contract."""

    @pytest.mark.asyncio
    async def test_deploy(
        self, ledger: MockLedger, network: MockSorobanNetwork, deployer: Wallet, rio: Asset
    ):
        """Prepared, signed by the deployer, sent and confirmed."""
        network.queue_statuses(TransactionStatus.NOT_FOUND)

        contract_id = await deploy_asset_contract(ledger, network, deployer, rio, policy=FAST)

        assert contract_id == asset_contract_id(rio, network.network_passphrase)
        assert len(network.prepared) == 1
        [envelope] = network.sent.values()
        assert envelope.transaction.source.account_id == deployer.public_key
        assert len(envelope.signatures) == 1
        assert len(network.status_requests) == 2

    @pytest.mark.asyncio
    async def test_simulation_error(
        self, ledger: MockLedger, network: MockSorobanNetwork, deployer: Wallet, rio: Asset
    ):
        """A failed simulation stops before anything is sent."""
        network.simulation_error = "contract already exists"

        with pytest.raises(TransactionFailedError) as exc_info:
            await deploy_asset_contract(ledger, network, deployer, rio, policy=FAST)

        assert exc_info.value.response_body == "contract already exists"
        assert network.sent == {}

    @pytest.mark.asyncio
    async def test_failed_on_chain(
        self, ledger: MockLedger, network: MockSorobanNetwork, deployer: Wallet, rio: Asset
    ):
        network.queue_statuses(TransactionStatus.PENDING, TransactionStatus.FAILED)

        with pytest.raises(TransactionFailedError) as exc_info:
            await deploy_asset_contract(ledger, network, deployer, rio, policy=FAST)

        assert exc_info.value.tx_hash in network.sent
