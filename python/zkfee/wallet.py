"""Wallet loading from a BIP-39 seed phrase."""

from mnemonic import Mnemonic
from solders.keypair import Keypair  # type: ignore

from .constants import DERIVATION_PATH, ENV_MNEMONIC


def load_wallet(mnemonic: str | None, derivation_path: str = DERIVATION_PATH) -> Keypair:
    """Derive the signing keypair from a seed phrase.

    Args:
        mnemonic: Space-separated 12 or 24 word seed phrase.
        derivation_path: SLIP-10 ed25519 derivation path.

    Returns:
        The derived Keypair.

    Raises:
        ValueError: If the seed phrase is not set.
    """
    if not mnemonic or not mnemonic.strip():
        raise ValueError(f"{ENV_MNEMONIC} not set")

    phrase = " ".join(mnemonic.split())
    seed = Mnemonic.to_seed(phrase)
    return Keypair.from_seed_and_derivation_path(seed, derivation_path)
