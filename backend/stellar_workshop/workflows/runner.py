"""Client wiring and the outer error boundary shared by all workflows."""

import asyncio
import inspect
import logging
import signal
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from soroswap_client import SoroswapClient

from stellar_workshop import narration
from stellar_workshop.blockchain.horizon import HorizonLedger
from stellar_workshop.blockchain.polling import PollPolicy
from stellar_workshop.blockchain.protocols import ContractNetwork, LedgerClient
from stellar_workshop.blockchain.soroban import SorobanNetwork
from stellar_workshop.config import Settings
from stellar_workshop.exceptions import describe_error
from stellar_workshop.models.result import WorkflowReport

logger = logging.getLogger(__name__)

# Called as workflow(clients, settings, cancel)
Workflow = Callable[["Clients", Settings, asyncio.Event], Awaitable[WorkflowReport]]


@dataclass
class Clients:
    """
    One client per external service, built once and passed to every step.

    soroswap is None when no API key is configured.
    """

    ledger: LedgerClient
    network: ContractNetwork
    soroswap: Optional[SoroswapClient] = None

    async def close(self) -> None:
        for client in (self.ledger, self.network, self.soroswap):
            close = getattr(client, "close", None)
            if close is None:
                continue
            result = close()
            if inspect.isawaitable(result):
                await result


def build_clients(settings: Settings) -> Clients:
    """Create the network clients described by the settings."""
    soroswap = None
    if settings.soroswap_api_key:
        soroswap = SoroswapClient(
            api_key=settings.soroswap_api_key,
            base_url=settings.soroswap_api_url,
            network=settings.soroswap_network,
        )
    else:
        logger.warning("No SOROSWAP_API_KEY provided, aggregator steps will be simulated")

    return Clients(
        ledger=HorizonLedger(
            horizon_url=settings.horizon_url,
            friendbot_url=settings.friendbot_url,
            network_passphrase=settings.network_passphrase,
        ),
        network=SorobanNetwork(
            rpc_url=settings.soroban_rpc_url,
            network_passphrase=settings.network_passphrase,
        ),
        soroswap=soroswap,
    )


def poll_policy(settings: Settings) -> PollPolicy:
    return PollPolicy(
        initial_delay=settings.poll_initial_delay,
        max_delay=settings.poll_max_delay,
        timeout=settings.poll_timeout,
    )


async def run_with_boundary(
    name: str,
    workflow: Workflow,
    clients: Clients,
    settings: Settings,
    cancel: Optional[asyncio.Event] = None,
) -> int:
    """
    Run a workflow, logging any failure instead of raising it.

    Nothing already submitted is rolled back. Clients are always closed.
    SIGINT sets the cancellation token, which stops any transaction poll
    in progress.

    Returns:
        Process exit status: 0 on completion, 1 on failure
    """
    if cancel is None:
        cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.set)
        handles_sigint = True
    except (NotImplementedError, RuntimeError):
        # No signal handlers on this platform or outside the main thread
        handles_sigint = False

    try:
        await workflow(clients, settings, cancel)
    except Exception as e:
        logger.error(f"{name} failed: {describe_error(e)}", exc_info=True)
        narration.failure(name, e)
        return 1
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)
        await clients.close()
    return 0


def main(name: str, workflow: Workflow, settings: Optional[Settings] = None) -> int:
    """Entry point: configure logging, build clients, run the workflow."""
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    clients = build_clients(settings)
    return asyncio.run(run_with_boundary(name, workflow, clients, settings))
