from decimal import Decimal

from stellar_sdk import Asset, LiquidityPoolAsset

from stellar_workshop.exceptions import FaucetError, TransactionFailedError, describe_error
from stellar_workshop.models.balance import BalanceLine, balance_of
from stellar_workshop.models.result import StepOutcome, StepResult, WorkflowReport
from stellar_workshop.models.wallet import Wallet

ISSUER = Wallet.create("issuer").public_key
RIO = Asset("RIO", ISSUER)


class TestBalanceLine:
    """Tests for Horizon balance records."""

    def test_from_horizon_credit(self):
        line = BalanceLine.from_horizon({
            "balance": "500000.0000000",
            "limit": "922337203685.4775807",
            "asset_type": "credit_alphanum4",
            "asset_code": "RIO",
            "asset_issuer": ISSUER,
        })

        assert line.balance == Decimal("500000")
        assert line.label == "RIO"
        assert line.matches(RIO)
        assert not line.matches(Asset.native())

    def test_from_horizon_native_and_shares(self):
        native = BalanceLine.from_horizon({"balance": "9999.9999", "asset_type": "native"})
        shares = BalanceLine.from_horizon({
            "balance": "22360.6797749",
            "limit": "922337203685.4775807",
            "asset_type": "liquidity_pool_shares",
            "liquidity_pool_id": "ab" * 32,
        })

        assert native.label == "XLM"
        assert native.limit is None
        assert shares.label == "LP Shares"
        assert shares.is_pool_shares

    def test_balance_of(self):
        pool = LiquidityPoolAsset(Asset.native(), RIO)
        lines = [
            BalanceLine(asset_type="native", balance=Decimal("100")),
            BalanceLine(
                asset_type="liquidity_pool_shares",
                balance=Decimal("7"),
                liquidity_pool_id=pool.liquidity_pool_id,
            ),
        ]

        assert balance_of(lines, Asset.native()) == Decimal("100")
        assert balance_of(lines, pool) == Decimal("7")
        assert balance_of(lines, RIO) == Decimal("0")


class TestWorkflowReport:
    """Tests for step results."""

    def test_all_confirmed(self):
        report = WorkflowReport(name="test")
        report.record(StepResult.confirmed("one", "hash"))

        assert report.all_confirmed

        report.record(StepResult.simulated("two", "no key"))

        assert not report.all_confirmed
        assert report.get("two").outcome == StepOutcome.SIMULATED
        assert report.get("three") is None

    def test_failed_keeps_error(self):
        result = StepResult.failed("swap", "boom", "hash")

        assert result.outcome == StepOutcome.FAILED
        assert result.error == "boom"
        assert not result.is_confirmed


class TestDescribeError:
    """Tests for error messages with nested response bodies."""

    def test_includes_body(self):
        error = TransactionFailedError(
            "Issue RIO",
            response_body={"result_codes": {"transaction": "tx_bad_auth"}},
        )

        assert describe_error(error) == (
            "Issue RIO failed (response: {'result_codes': {'transaction': 'tx_bad_auth'}})"
        )
        assert error.result_codes == {"transaction": "tx_bad_auth"}

    def test_without_body(self):
        assert describe_error(ValueError("bad")) == "bad"
        assert describe_error(FaucetError("GABC")) == "Friendbot could not fund GABC"
