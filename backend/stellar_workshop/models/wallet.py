from dataclasses import dataclass

from stellar_sdk import Keypair


@dataclass
class Wallet:
    """
    A named testnet key pair.

    Generated fresh for each run and never persisted.
    """

    name: str
    keypair: Keypair

    @staticmethod
    def create(name: str) -> "Wallet":
        """Factory method to create a wallet with a random key pair."""
        return Wallet(name=name, keypair=Keypair.random())

    @property
    def public_key(self) -> str:
        return self.keypair.public_key

    @property
    def secret(self) -> str:
        return self.keypair.secret
