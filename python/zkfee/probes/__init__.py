"""Fee probes: one per transfer kind."""

from zkfee.probes.compressed import CompressedTransferProbe
from zkfee.probes.standard import StandardTransferProbe

__all__ = [
    "CompressedTransferProbe",
    "StandardTransferProbe",
]
