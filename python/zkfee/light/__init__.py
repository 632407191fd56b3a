"""Light Protocol compressed-token client.

Covers what the fee comparison needs: state tree and token pool lookup,
indexer queries, and the compress / transfer instructions.
"""

from zkfee.light.actions import build_and_sign_tx, select_min_accounts_for_transfer, transfer
from zkfee.light.instructions import compress, decode_transfer_data, derive_token_pool_pda
from zkfee.light.rpc import LightRpc, LightRpcError
from zkfee.light.types import (
    CompressedProof,
    CompressedTokenAccount,
    TokenPoolInfo,
    TreeInfo,
    ValidityProof,
)

__all__ = [
    # Types
    "CompressedProof",
    "CompressedTokenAccount",
    "TokenPoolInfo",
    "TreeInfo",
    "ValidityProof",
    # RPC
    "LightRpc",
    "LightRpcError",
    # Instructions
    "compress",
    "decode_transfer_data",
    "derive_token_pool_pda",
    # Actions
    "build_and_sign_tx",
    "select_min_accounts_for_transfer",
    "transfer",
]
