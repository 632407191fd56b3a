"""ZK compression fee comparison on Solana mainnet.

Sends a standard SOL transfer and a Light Protocol compressed token
transfer from the same wallet, then reports the network fee each paid.
"""

from zkfee.config import ProbeConfig
from zkfee.probes import CompressedTransferProbe, StandardTransferProbe
from zkfee.report import print_report
from zkfee.runner import main, run
from zkfee.types import ProbeResult
from zkfee.wallet import load_wallet

__all__ = [
    "ProbeConfig",
    "ProbeResult",
    "StandardTransferProbe",
    "CompressedTransferProbe",
    "load_wallet",
    "print_report",
    "run",
    "main",
]
