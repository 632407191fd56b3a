"""Types for the ZK compression fee comparison."""

from dataclasses import asdict, dataclass
from typing import Any

from .constants import EXPLORER_TX_URL, LAMPORTS_PER_SOL


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single fee probe."""

    label: str
    signature: str
    fee: int  # lamports
    fee_sol: str
    explorer_url: str

    @classmethod
    def from_fee(cls, label: str, signature: str, fee: int) -> "ProbeResult":
        return cls(
            label=label,
            signature=signature,
            fee=fee,
            fee_sol=format_sol(fee, decimals=9),
            explorer_url=EXPLORER_TX_URL.format(signature=signature),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def format_sol(lamports: int, decimals: int = 9) -> str:
    """Format a lamport amount as a fixed-point SOL string."""
    return f"{lamports / LAMPORTS_PER_SOL:.{decimals}f}"
