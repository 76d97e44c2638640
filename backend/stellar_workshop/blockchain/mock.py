"""
In-memory ledger doubles.

MockLedger applies the classic operations the workflows use with the
ledger rules they rely on: sequence numbers, signature weights,
trustlines and limits, issuer minting, constant-product pools. Failed
transactions consume their sequence number and fee but apply no
operations, and raise TransactionFailedError with Horizon-style result
codes.

MockSorobanNetwork records contract transactions and answers status
polls from a script.
"""

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal
from typing import Any, Optional, Union

from stellar_sdk import Account, Asset, Keypair, LiquidityPoolAsset, TransactionEnvelope
from stellar_sdk.exceptions import BadSignatureError
from stellar_sdk.operation import (
    ChangeTrust,
    LiquidityPoolDeposit,
    PathPaymentStrictSend,
    Payment,
    SetOptions,
)

from stellar_workshop.blockchain.protocols import TransactionStatus
from stellar_workshop.config import NETWORK_PASSPHRASE
from stellar_workshop.exceptions import FaucetError, TransactionFailedError, WorkshopError
from stellar_workshop.models.balance import BalanceLine

logger = logging.getLogger(__name__)

STROOP = Decimal("0.0000001")
FRIENDBOT_STARTING_BALANCE = Decimal("10000")
MAX_TRUSTLINE_LIMIT = Decimal("922337203685.4775807")


def asset_key(asset: Asset) -> str:
    """Ledger key of an asset: "native" or "CODE:ISSUER"."""
    if asset.is_native():
        return "native"
    return f"{asset.code}:{asset.issuer}"


def pool_key(liquidity_pool_id: str) -> str:
    return f"pool:{liquidity_pool_id}"


def _amount(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(STROOP, rounding=ROUND_DOWN)


def _price(value: Any) -> Decimal:
    if hasattr(value, "n") and hasattr(value, "d"):
        return Decimal(value.n) / Decimal(value.d)
    return Decimal(str(value))


class OperationError(Exception):
    """An operation failed with a ledger result code."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(code)


@dataclass
class MockAccount:
    account_id: str
    sequence: int
    balances: dict[str, Decimal] = field(default_factory=dict)
    limits: dict[str, Decimal] = field(default_factory=dict)  # trustlines
    master_weight: int = 1
    low_threshold: int = 0
    med_threshold: int = 0
    high_threshold: int = 0


@dataclass
class MockPool:
    """Constant-product pool. Reserves follow the pool asset's canonical order."""

    pool_asset: LiquidityPoolAsset
    reserve_a: Decimal = Decimal("0")
    reserve_b: Decimal = Decimal("0")
    total_shares: Decimal = Decimal("0")

    @property
    def liquidity_pool_id(self) -> str:
        return self.pool_asset.liquidity_pool_id

    @property
    def price(self) -> Decimal:
        """Reserve ratio A/B, the price deposits are checked against."""
        return self.reserve_a / self.reserve_b


@dataclass
class _LedgerState:
    accounts: dict[str, MockAccount] = field(default_factory=dict)
    pools: dict[str, MockPool] = field(default_factory=dict)
    issued: dict[str, Decimal] = field(default_factory=dict)  # outstanding supply


class MockLedger:
    """
    In-memory classic ledger for tests.

    Issuers hold no trustline to their own assets: a payment from the
    issuer mints, a payment to the issuer burns. position() reports the
    issuer's side as the negative outstanding supply, so every asset's
    positions sum to zero.
    """

    def __init__(self, network_passphrase: str = NETWORK_PASSPHRASE) -> None:
        self.network_passphrase = network_passphrase
        self._state = _LedgerState()
        self._next_sequence = 1000 << 32
        self.refused_faucet: set[str] = set()
        self.submitted: list[TransactionEnvelope] = []
        self.fund_requests: list[str] = []

    # Accounts

    def create_account(
        self,
        address: str,
        balance: Decimal = FRIENDBOT_STARTING_BALANCE,
    ) -> MockAccount:
        """Create an account directly, bypassing Friendbot."""
        account = MockAccount(
            account_id=address,
            sequence=self._next_sequence,
            balances={"native": _amount(balance)},
        )
        self._next_sequence += 1 << 32
        self._state.accounts[address] = account
        return account

    def account(self, address: str) -> MockAccount:
        try:
            return self._state.accounts[address]
        except KeyError:
            raise WorkshopError(f"Account {address} not found") from None

    def load_account(self, account_id: str) -> Account:
        return Account(account_id, self.account(account_id).sequence)

    async def fund_account(self, address: str) -> None:
        self.fund_requests.append(address)
        if address in self.refused_faucet:
            raise FaucetError(address, {"detail": "friendbot unavailable"})
        if address in self._state.accounts:
            raise FaucetError(address, {"detail": "createAccountAlreadyExist"})
        self.create_account(address)
        logger.info(f"Mock Friendbot funded {address}")

    def get_balances(self, account_id: str) -> list[BalanceLine]:
        account = self.account(account_id)
        lines = [BalanceLine(asset_type="native", balance=account.balances["native"])]
        for key, limit in account.limits.items():
            balance = account.balances.get(key, Decimal("0"))
            if key.startswith("pool:"):
                lines.append(
                    BalanceLine(
                        asset_type="liquidity_pool_shares",
                        balance=balance,
                        liquidity_pool_id=key[len("pool:"):],
                        limit=limit,
                    )
                )
            else:
                code, issuer = key.split(":")
                lines.append(
                    BalanceLine(
                        asset_type="credit_alphanum4" if len(code) <= 4 else "credit_alphanum12",
                        balance=balance,
                        asset_code=code,
                        asset_issuer=issuer,
                        limit=limit,
                    )
                )
        return lines

    def position(self, account_id: str, asset: Asset) -> Decimal:
        """Signed holding of an asset; negative outstanding supply for its issuer."""
        key = asset_key(asset)
        if not asset.is_native() and asset.issuer == account_id:
            return -self._state.issued.get(key, Decimal("0"))
        return self.account(account_id).balances.get(key, Decimal("0"))

    def pool(self, liquidity_pool_id: str) -> Optional[MockPool]:
        return self._state.pools.get(liquidity_pool_id)

    # Submission

    def submit_transaction(
        self,
        envelope: TransactionEnvelope,
        description: str = "Transaction",
    ) -> str:
        self.submitted.append(envelope)
        tx = envelope.transaction
        tx_hash = envelope.hash_hex()
        source_id = tx.source.account_id

        if envelope.network_passphrase != self.network_passphrase:
            self._reject(description, tx_hash, "tx_bad_auth")

        source = self._state.accounts.get(source_id)
        if source is None:
            self._reject(description, tx_hash, "tx_no_source_account")
        if tx.sequence != source.sequence + 1:
            self._reject(description, tx_hash, "tx_bad_seq")

        fee = Decimal(tx.fee) * STROOP
        if source.balances["native"] < fee:
            self._reject(description, tx_hash, "tx_insufficient_balance")

        for account_id, threshold in self._required_signers(tx, source_id).items():
            if not self._is_authorized(envelope, account_id, threshold):
                self._reject(description, tx_hash, "tx_bad_auth")

        # From here on the sequence number and fee are consumed
        source.sequence = tx.sequence
        source.balances["native"] -= fee

        working = copy.deepcopy(self._state)
        codes: list[str] = []
        for op in tx.operations:
            op_source = op.source.account_id if op.source else source_id
            try:
                self._apply(working, op, op_source)
            except OperationError as e:
                codes.append(e.code)
                logger.info(f"Mock {description} failed: {e.code}")
                raise TransactionFailedError(
                    description,
                    tx_hash=tx_hash,
                    response_body={
                        "result_codes": {"transaction": "tx_failed", "operations": codes}
                    },
                ) from e
            codes.append("op_success")

        self._state = working
        logger.info(f"Mock {description} applied: {tx_hash}")
        return tx_hash

    def _reject(self, description: str, tx_hash: str, code: str) -> None:
        raise TransactionFailedError(
            description,
            tx_hash=tx_hash,
            response_body={"result_codes": {"transaction": code}},
        )

    def _required_signers(self, tx: Any, source_id: str) -> dict[str, int]:
        """Accounts whose signature is needed, with the threshold each must meet."""
        required: dict[str, int] = {}
        source = self._state.accounts[source_id]
        required[source_id] = source.low_threshold
        for op in tx.operations:
            account_id = op.source.account_id if op.source else source_id
            account = self._state.accounts.get(account_id)
            if account is None:
                continue
            threshold = account.high_threshold if isinstance(op, SetOptions) else account.med_threshold
            required[account_id] = max(required.get(account_id, 0), threshold)
        return required

    def _is_authorized(self, envelope: TransactionEnvelope, account_id: str, threshold: int) -> bool:
        account = self._state.accounts.get(account_id)
        if account is None:
            return False
        keypair = Keypair.from_public_key(account_id)
        tx_hash = envelope.hash()
        for decorated in envelope.signatures:
            if decorated.signature_hint != keypair.signature_hint():
                continue
            try:
                keypair.verify(tx_hash, decorated.signature)
            except BadSignatureError:
                continue
            weight = account.master_weight
            return weight > 0 and weight >= threshold
        return False

    # Operations

    def _apply(self, state: _LedgerState, op: Any, source_id: str) -> None:
        if isinstance(op, ChangeTrust):
            self._change_trust(state, op, source_id)
        elif isinstance(op, Payment):
            self._payment(state, op, source_id)
        elif isinstance(op, SetOptions):
            self._set_options(state, op, source_id)
        elif isinstance(op, LiquidityPoolDeposit):
            self._pool_deposit(state, op, source_id)
        elif isinstance(op, PathPaymentStrictSend):
            self._path_payment_strict_send(state, op, source_id)
        else:
            raise OperationError("op_not_supported")

    def _change_trust(self, state: _LedgerState, op: ChangeTrust, source_id: str) -> None:
        account = state.accounts[source_id]
        asset: Union[Asset, LiquidityPoolAsset] = op.asset

        if isinstance(asset, LiquidityPoolAsset):
            for member in (asset.asset_a, asset.asset_b):
                if member.is_native() or member.issuer == source_id:
                    continue
                if asset_key(member) not in account.limits:
                    raise OperationError("op_trust_line_missing")
            key = pool_key(asset.liquidity_pool_id)
            state.pools.setdefault(asset.liquidity_pool_id, MockPool(pool_asset=asset))
        else:
            if asset.is_native():
                raise OperationError("op_malformed")
            if asset.issuer == source_id:
                raise OperationError("op_self_not_allowed")
            if asset.issuer not in state.accounts:
                raise OperationError("op_no_issuer")
            key = asset_key(asset)

        limit = _amount(op.limit) if op.limit is not None else MAX_TRUSTLINE_LIMIT
        balance = account.balances.get(key, Decimal("0"))

        if limit == 0:
            if balance != 0:
                raise OperationError("op_invalid_limit")
            account.limits.pop(key, None)
            account.balances.pop(key, None)
            return
        if limit < balance:
            raise OperationError("op_invalid_limit")

        account.limits[key] = limit
        account.balances.setdefault(key, Decimal("0"))

    def _payment(self, state: _LedgerState, op: Payment, source_id: str) -> None:
        amount = _amount(op.amount)
        if amount <= 0:
            raise OperationError("op_malformed")
        destination_id = op.destination.account_id
        if destination_id not in state.accounts:
            raise OperationError("op_no_destination")
        self._debit(state, source_id, op.asset, amount)
        self._credit(state, destination_id, op.asset, amount)

    def _set_options(self, state: _LedgerState, op: SetOptions, source_id: str) -> None:
        account = state.accounts[source_id]
        if op.master_weight is not None:
            account.master_weight = op.master_weight
        if op.low_threshold is not None:
            account.low_threshold = op.low_threshold
        if op.med_threshold is not None:
            account.med_threshold = op.med_threshold
        if op.high_threshold is not None:
            account.high_threshold = op.high_threshold

    def _pool_deposit(self, state: _LedgerState, op: LiquidityPoolDeposit, source_id: str) -> None:
        account = state.accounts[source_id]
        pool = state.pools.get(op.liquidity_pool_id)
        shares_key = pool_key(op.liquidity_pool_id)
        if pool is None or shares_key not in account.limits:
            raise OperationError("op_no_trust")

        max_a = _amount(op.max_amount_a)
        max_b = _amount(op.max_amount_b)
        min_price = _price(op.min_price)
        max_price = _price(op.max_price)
        if max_a <= 0 or max_b <= 0:
            raise OperationError("op_malformed")

        if pool.total_shares == 0:
            amount_a, amount_b = max_a, max_b
            price = amount_a / amount_b
            shares = (amount_a * amount_b).sqrt()
        else:
            price = pool.price
            amount_b = max_b
            amount_a = _amount(max_b * pool.reserve_a / pool.reserve_b)
            if amount_a > max_a:
                amount_a = max_a
                amount_b = _amount(max_a * pool.reserve_b / pool.reserve_a)
            shares = min(
                amount_a * pool.total_shares / pool.reserve_a,
                amount_b * pool.total_shares / pool.reserve_b,
            )

        if price < min_price or price > max_price:
            raise OperationError("op_bad_price")
        shares = _amount(shares)
        if amount_a <= 0 or amount_b <= 0 or shares <= 0:
            raise OperationError("op_bad_price")

        self._debit(state, source_id, pool.pool_asset.asset_a, amount_a)
        self._debit(state, source_id, pool.pool_asset.asset_b, amount_b)
        pool.reserve_a += amount_a
        pool.reserve_b += amount_b
        pool.total_shares += shares
        account.balances[shares_key] = account.balances.get(shares_key, Decimal("0")) + shares

    def _path_payment_strict_send(
        self,
        state: _LedgerState,
        op: PathPaymentStrictSend,
        source_id: str,
    ) -> None:
        destination_id = op.destination.account_id
        if destination_id not in state.accounts:
            raise OperationError("op_no_destination")

        amount = _amount(op.send_amount)
        if amount <= 0:
            raise OperationError("op_malformed")
        self._debit(state, source_id, op.send_asset, amount)

        hops = [op.send_asset, *op.path, op.dest_asset]
        for asset_in, asset_out in zip(hops, hops[1:]):
            amount = self._swap(state, asset_in, asset_out, amount)

        if amount < _amount(op.dest_min):
            raise OperationError("op_under_dest_min")
        self._credit(state, destination_id, op.dest_asset, amount)

    def _swap(self, state: _LedgerState, asset_in: Asset, asset_out: Asset, amount: Decimal) -> Decimal:
        """Trade through the pool holding both assets; returns the amount out."""
        key_in, key_out = asset_key(asset_in), asset_key(asset_out)
        for pool in state.pools.values():
            if pool.total_shares == 0:
                continue
            key_a = asset_key(pool.pool_asset.asset_a)
            key_b = asset_key(pool.pool_asset.asset_b)
            if {key_a, key_b} != {key_in, key_out}:
                continue

            fee_factor = 10000 - pool.pool_asset.fee
            if key_in == key_a:
                reserve_in, reserve_out = pool.reserve_a, pool.reserve_b
            else:
                reserve_in, reserve_out = pool.reserve_b, pool.reserve_a
            out = _amount(
                reserve_out * amount * fee_factor
                / (reserve_in * 10000 + amount * fee_factor)
            )
            if out <= 0:
                raise OperationError("op_too_few_offers")

            if key_in == key_a:
                pool.reserve_a += amount
                pool.reserve_b -= out
            else:
                pool.reserve_b += amount
                pool.reserve_a -= out
            return out

        raise OperationError("op_too_few_offers")

    def _debit(self, state: _LedgerState, account_id: str, asset: Asset, amount: Decimal) -> None:
        key = asset_key(asset)
        account = state.accounts[account_id]
        if asset.is_native():
            if account.balances["native"] < amount:
                raise OperationError("op_underfunded")
            account.balances["native"] -= amount
        elif asset.issuer == account_id:
            state.issued[key] = state.issued.get(key, Decimal("0")) + amount
        else:
            if key not in account.limits:
                raise OperationError("op_src_no_trust")
            if account.balances.get(key, Decimal("0")) < amount:
                raise OperationError("op_underfunded")
            account.balances[key] -= amount

    def _credit(self, state: _LedgerState, account_id: str, asset: Asset, amount: Decimal) -> None:
        key = asset_key(asset)
        account = state.accounts[account_id]
        if asset.is_native():
            account.balances["native"] += amount
        elif asset.issuer == account_id:
            state.issued[key] = state.issued.get(key, Decimal("0")) - amount
        else:
            if key not in account.limits:
                raise OperationError("op_no_trust")
            balance = account.balances.get(key, Decimal("0"))
            if balance + amount > account.limits[key]:
                raise OperationError("op_line_full")
            account.balances[key] = balance + amount


class MockSorobanNetwork:
    """
    Soroban RPC double.

    Sent transactions report the statuses queued for them, then SUCCESS.
    Unknown hashes report NOT_FOUND.
    """

    def __init__(self, network_passphrase: str = NETWORK_PASSPHRASE) -> None:
        self.network_passphrase = network_passphrase
        self.prepared: list[TransactionEnvelope] = []
        self.sent: dict[str, TransactionEnvelope] = {}
        self.status_requests: list[str] = []
        self.simulation_error: Optional[str] = None
        self._scripts: dict[str, deque[TransactionStatus]] = {}
        self._next_script: list[TransactionStatus] = []

    def queue_statuses(self, *statuses: TransactionStatus) -> None:
        """Statuses reported for the next sent transaction."""
        self._next_script = list(statuses)

    def set_statuses(self, tx_hash: str, *statuses: TransactionStatus) -> None:
        """Statuses reported for a specific hash."""
        self._scripts[tx_hash] = deque(statuses)

    def prepare_transaction(self, envelope: TransactionEnvelope) -> TransactionEnvelope:
        if self.simulation_error:
            raise TransactionFailedError("Simulation", response_body=self.simulation_error)
        self.prepared.append(envelope)
        return envelope

    def send_transaction(
        self,
        envelope: TransactionEnvelope,
        description: str = "Transaction",
    ) -> str:
        tx_hash = envelope.hash_hex()
        if not envelope.signatures:
            raise TransactionFailedError(description, tx_hash=tx_hash, response_body="txBadAuth")
        self.sent[tx_hash] = envelope
        if tx_hash not in self._scripts:
            self._scripts[tx_hash] = deque(self._next_script)
        self._next_script = []
        logger.info(f"Mock {description} sent: {tx_hash}")
        return tx_hash

    def get_transaction_status(self, tx_hash: str) -> TransactionStatus:
        self.status_requests.append(tx_hash)
        script = self._scripts.get(tx_hash)
        if script is None:
            return TransactionStatus.NOT_FOUND
        if script:
            return script.popleft()
        return TransactionStatus.SUCCESS
