"""Fee comparison run: standard transfer, pause, compressed transfer, report.

Usage:
    export HELIUS_API_KEY="your_key"
    export TEST_WALLET_MNEMONIC="your twelve word mnemonic here"
    export TEST_RECIPIENT_ADDRESS="recipient_public_key"
    zkfee

The wallet needs roughly 0.5 SOL on mainnet. Transfers are real and
irreversible.
"""

import sys
import time
from typing import Callable

from dotenv import load_dotenv
from loguru import logger
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed

from .config import ProbeConfig
from .constants import PROBE_DELAY_SECONDS, TEST_AMOUNT_LAMPORTS
from .light.actions import CompressionRpc
from .light.rpc import LightRpc
from .probes import CompressedTransferProbe, StandardTransferProbe
from .report import print_report
from .types import ProbeResult, format_sol
from .wallet import load_wallet


def run(
    config: ProbeConfig,
    connection: Client | None = None,
    light_rpc: CompressionRpc | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[ProbeResult, ProbeResult]:
    """Run both probes and print the summary.

    Args:
        config: Run configuration; validated before any network call.
        connection: Standard chain client (defaults to one on config.rpc_url).
        light_rpc: Compression-aware RPC (defaults to LightRpc on config.rpc_url).
        sleep: Pause used between the probes.

    Returns:
        (standard, compressed) probe results.
    """
    logger.info("ZK COMPRESSION FEE COMPARISON - SOLANA MAINNET")

    config.validate()
    wallet = load_wallet(config.mnemonic)
    recipient = config.recipient_pubkey

    if connection is None:
        connection = Client(config.rpc_url, commitment=Confirmed)
    owned_light_rpc = None
    if light_rpc is None:
        light_rpc = owned_light_rpc = LightRpc(config.rpc_url, connection=connection)

    try:
        logger.info("Wallet: {}", wallet.pubkey())
        balance = connection.get_balance(wallet.pubkey()).value
        logger.info("Balance: {} lamports ({} SOL)", balance, format_sol(balance, decimals=6))

        standard = StandardTransferProbe(connection, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()

        logger.info("Waiting {} seconds before next test...", PROBE_DELAY_SECONDS)
        sleep(PROBE_DELAY_SECONDS)

        compressed = CompressedTransferProbe(
            connection, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS
        ).run()
    finally:
        if owned_light_rpc is not None:
            owned_light_rpc.close()

    print_report(standard, compressed)
    return standard, compressed


def main() -> None:
    load_dotenv()

    try:
        run(ProbeConfig.from_env())
    except Exception as e:
        logger.exception("Fee comparison failed: {}", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
