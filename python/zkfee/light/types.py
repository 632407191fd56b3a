"""Types for Light Protocol compressed tokens."""

from dataclasses import dataclass
from typing import Any

from solders.pubkey import Pubkey  # type: ignore


@dataclass
class TreeInfo:
    """A state tree with its nullifier queue and CPI context account."""

    tree: Pubkey
    queue: Pubkey
    cpi_context: Pubkey | None
    tree_type: str
    next_tree_info: "TreeInfo | None" = None


@dataclass
class TokenPoolInfo:
    """A token pool PDA holding the SPL backing of compressed tokens."""

    mint: Pubkey
    token_pool_pda: Pubkey
    token_program: Pubkey
    is_initialized: bool
    balance: int
    pool_index: int
    bump: int


@dataclass
class CompressedTokenAccount:
    """A compressed token account as returned by the indexer."""

    hash: str  # base58
    tree: Pubkey
    leaf_index: int
    owner: Pubkey
    mint: Pubkey
    amount: int
    lamports: int = 0
    delegate: Pubkey | None = None

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "CompressedTokenAccount":
        account = item["account"]
        token_data = item["tokenData"]

        tree = account.get("tree")
        if tree is None:
            tree = account["merkleContext"]["tree"]

        delegate = token_data.get("delegate")
        return cls(
            hash=account["hash"],
            tree=Pubkey.from_string(tree),
            leaf_index=int(account["leafIndex"]),
            owner=Pubkey.from_string(token_data["owner"]),
            mint=Pubkey.from_string(token_data["mint"]),
            amount=int(token_data["amount"]),
            lamports=int(account.get("lamports") or 0),
            delegate=Pubkey.from_string(delegate) if delegate else None,
        )


@dataclass
class CompressedProof:
    """Groth16 proof points, compressed."""

    a: bytes  # 32 bytes
    b: bytes  # 64 bytes
    c: bytes  # 32 bytes

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CompressedProof":
        return cls(a=bytes(data["a"]), b=bytes(data["b"]), c=bytes(data["c"]))


@dataclass
class ValidityProof:
    """Validity proof for a set of input compressed accounts."""

    compressed_proof: CompressedProof | None
    root_indices: list[int]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidityProof":
        proof = data.get("compressedProof")
        root_indices = []
        for entry in data.get("rootIndices", []):
            # Newer indexers return {"rootIndex": n, "proveByIndex": bool}
            if isinstance(entry, dict):
                entry = entry["rootIndex"]
            root_indices.append(int(entry))
        return cls(
            compressed_proof=CompressedProof.from_dict(proof) if proof else None,
            root_indices=root_indices,
        )
