"""Scripted Stellar testnet workflows: issuance, liquidity and trading."""

__version__ = "0.1.0"
