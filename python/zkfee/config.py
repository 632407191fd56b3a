"""Environment configuration for the fee comparison run."""

import os
from dataclasses import dataclass
from typing import Mapping

from solders.pubkey import Pubkey  # type: ignore

from .constants import (
    ENV_API_KEY,
    ENV_MNEMONIC,
    ENV_RECIPIENT,
    ENV_RPC_URL,
    HELIUS_MAINNET_RPC_URL,
)


@dataclass
class ProbeConfig:
    """Configuration read once from the process environment."""

    api_key: str
    recipient: str
    mnemonic: str = ""
    rpc_url_override: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ProbeConfig":
        if environ is None:
            environ = os.environ
        return cls(
            api_key=environ.get(ENV_API_KEY, ""),
            recipient=environ.get(ENV_RECIPIENT, ""),
            mnemonic=environ.get(ENV_MNEMONIC, ""),
            rpc_url_override=environ.get(ENV_RPC_URL, ""),
        )

    @property
    def rpc_url(self) -> str:
        if self.rpc_url_override:
            return self.rpc_url_override
        return HELIUS_MAINNET_RPC_URL.format(api_key=self.api_key)

    @property
    def recipient_pubkey(self) -> Pubkey:
        return Pubkey.from_string(self.recipient)

    def validate(self) -> None:
        """Check the required values before any transaction is built.

        The seed phrase is checked later, by the wallet loader.

        Raises:
            ValueError: If the API key or recipient is missing or malformed.
        """
        if not self.api_key:
            raise ValueError(f"{ENV_API_KEY} environment variable not set")
        if not self.recipient:
            raise ValueError(f"{ENV_RECIPIENT} environment variable not set")

        try:
            self.recipient_pubkey
        except ValueError:
            raise ValueError(f"Invalid recipient address: {self.recipient}") from None
