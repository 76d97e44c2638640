"""Workshop configuration, overridable via environment variables."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from stellar_sdk import Network

# Testnet configuration
HORIZON_URL = "https://horizon-testnet.stellar.org"
SOROBAN_RPC_URL = "https://soroban-testnet.stellar.org"
FRIENDBOT_URL = "https://friendbot.stellar.org"
NETWORK_PASSPHRASE = Network.TESTNET_NETWORK_PASSPHRASE

# Soroswap aggregator API
SOROSWAP_API_URL = "https://soroswap-api-staging-436722401508.us-central1.run.app"
SOROSWAP_NETWORK = "testnet"

BASE_FEE = 100  # stroops

# Transaction polling: capped exponential backoff under a deadline
POLL_INITIAL_DELAY = 1.0
POLL_MAX_DELAY = 8.0
POLL_TIMEOUT = 120.0

# Pause before trading so the pool can be inspected on an explorer
OBSERVE_PAUSE_SECONDS = 10


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one workflow run."""

    horizon_url: str = HORIZON_URL
    soroban_rpc_url: str = SOROBAN_RPC_URL
    friendbot_url: str = FRIENDBOT_URL
    network_passphrase: str = NETWORK_PASSPHRASE
    soroswap_api_url: str = SOROSWAP_API_URL
    soroswap_api_key: Optional[str] = None
    soroswap_network: str = SOROSWAP_NETWORK
    base_fee: int = BASE_FEE
    poll_initial_delay: float = POLL_INITIAL_DELAY
    poll_max_delay: float = POLL_MAX_DELAY
    poll_timeout: float = POLL_TIMEOUT
    observe_pause_seconds: int = OBSERVE_PAUSE_SECONDS
    log_level: str = "INFO"

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Missing variables fall back to the testnet defaults above. An empty
        SOROSWAP_API_KEY counts as unset.
        """
        env = os.environ if environ is None else environ
        return Settings(
            horizon_url=env.get("HORIZON_URL", HORIZON_URL),
            soroban_rpc_url=env.get("SOROBAN_RPC_URL", SOROBAN_RPC_URL),
            friendbot_url=env.get("FRIENDBOT_URL", FRIENDBOT_URL),
            network_passphrase=env.get("NETWORK_PASSPHRASE", NETWORK_PASSPHRASE),
            soroswap_api_url=env.get("SOROSWAP_API_URL", SOROSWAP_API_URL),
            soroswap_api_key=env.get("SOROSWAP_API_KEY") or None,
            soroswap_network=env.get("SOROSWAP_NETWORK", SOROSWAP_NETWORK),
            base_fee=int(env.get("BASE_FEE", BASE_FEE)),
            poll_initial_delay=float(env.get("POLL_INITIAL_DELAY", POLL_INITIAL_DELAY)),
            poll_max_delay=float(env.get("POLL_MAX_DELAY", POLL_MAX_DELAY)),
            poll_timeout=float(env.get("POLL_TIMEOUT", POLL_TIMEOUT)),
            observe_pause_seconds=int(
                env.get("OBSERVE_PAUSE_SECONDS", OBSERVE_PAUSE_SECONDS)
            ),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )
