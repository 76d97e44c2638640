from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional, Union

from stellar_sdk import Asset, LiquidityPoolAsset


@dataclass
class BalanceLine:
    """
    One balance entry of an account.

    asset_type follows Horizon: "native", "credit_alphanum4",
    "credit_alphanum12" or "liquidity_pool_shares".
    """

    asset_type: str
    balance: Decimal
    asset_code: Optional[str] = None
    asset_issuer: Optional[str] = None
    liquidity_pool_id: Optional[str] = None
    limit: Optional[Decimal] = None

    @staticmethod
    def from_horizon(record: dict[str, Any]) -> "BalanceLine":
        """Parse a balance record from a Horizon account response."""
        limit = record.get("limit")
        return BalanceLine(
            asset_type=record["asset_type"],
            balance=Decimal(record["balance"]),
            asset_code=record.get("asset_code"),
            asset_issuer=record.get("asset_issuer"),
            liquidity_pool_id=record.get("liquidity_pool_id"),
            limit=Decimal(limit) if limit is not None else None,
        )

    @property
    def is_native(self) -> bool:
        return self.asset_type == "native"

    @property
    def is_pool_shares(self) -> bool:
        return self.asset_type == "liquidity_pool_shares"

    @property
    def label(self) -> str:
        """Human-readable asset label."""
        if self.is_native:
            return "XLM"
        if self.is_pool_shares:
            return "LP Shares"
        return self.asset_code or "?"

    def matches(self, asset: Union[Asset, LiquidityPoolAsset]) -> bool:
        """Whether this line holds the given asset or pool shares."""
        if isinstance(asset, LiquidityPoolAsset):
            return self.liquidity_pool_id == asset.liquidity_pool_id
        if asset.is_native():
            return self.is_native
        return self.asset_code == asset.code and self.asset_issuer == asset.issuer


def balance_of(
    lines: list[BalanceLine],
    asset: Union[Asset, LiquidityPoolAsset],
) -> Decimal:
    """Balance held for an asset, zero when there is no line for it."""
    for line in lines:
        if line.matches(asset):
            return line.balance
    return Decimal("0")
