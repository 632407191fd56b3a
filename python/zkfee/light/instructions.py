"""Instruction builders for the compressed-token program.

Compress and transfer are both encoded as the program's ``transfer``
instruction; compress sets ``is_compress`` and pulls the SPL amount from a
token account into the token pool.
"""

import hashlib
from typing import Any

from construct import Container, Int32ul  # type: ignore
from solders.instruction import AccountMeta, Instruction  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.system_program import ID as SYS_PROGRAM_ID  # type: ignore

from ._layouts import TRANSFER_DATA_LAYOUT
from .constants import (
    ACCOUNT_COMPRESSION_PROGRAM_ID,
    COMPRESSED_TOKEN_PROGRAM_ID,
    CPI_AUTHORITY_SEED,
    LIGHT_SYSTEM_PROGRAM_ID,
    NOOP_PROGRAM_ID,
    POOL_SEED,
    REGISTERED_PROGRAM_PDA,
)
from .types import CompressedProof, CompressedTokenAccount, TokenPoolInfo, TreeInfo

TRANSFER_DISCRIMINATOR = hashlib.sha256(b"global:transfer").digest()[:8]


def get_cpi_authority_pda() -> Pubkey:
    return Pubkey.find_program_address([CPI_AUTHORITY_SEED], COMPRESSED_TOKEN_PROGRAM_ID)[0]


def get_account_compression_authority() -> Pubkey:
    return Pubkey.find_program_address([CPI_AUTHORITY_SEED], LIGHT_SYSTEM_PROGRAM_ID)[0]


def derive_token_pool_pda(mint: Pubkey, pool_index: int = 0) -> tuple[Pubkey, int]:
    """Derive the token pool PDA and bump for a mint."""
    seeds = [POOL_SEED, bytes(mint)]
    if pool_index > 0:
        seeds.append(bytes([pool_index]))
    return Pubkey.find_program_address(seeds, COMPRESSED_TOKEN_PROGRAM_ID)


def encode_transfer_data(data: dict[str, Any]) -> bytes:
    """Encode instruction data: discriminator, u32 length, Borsh payload."""
    inputs = TRANSFER_DATA_LAYOUT.build(data)
    return TRANSFER_DISCRIMINATOR + Int32ul.build(len(inputs)) + inputs


def decode_transfer_data(data: bytes) -> Container:
    """Decode compressed-token transfer instruction data.

    Raises:
        ValueError: If the data is not a transfer instruction.
    """
    if data[:8] != TRANSFER_DISCRIMINATOR:
        raise ValueError("Not a compressed-token transfer instruction")
    length = Int32ul.parse(data[8:12])
    return TRANSFER_DATA_LAYOUT.parse(data[12 : 12 + length])


class _RemainingAccounts:
    """Ordered, de-duplicated list of packed tree and queue accounts."""

    def __init__(self) -> None:
        self._keys: list[Pubkey] = []

    def index_of(self, key: Pubkey) -> int:
        if key not in self._keys:
            self._keys.append(key)
        return self._keys.index(key)

    def metas(self) -> list[AccountMeta]:
        return [AccountMeta(key, is_signer=False, is_writable=True) for key in self._keys]


def _transfer_accounts(
    fee_payer: Pubkey,
    authority: Pubkey,
    token_pool_pda: Pubkey | None = None,
    compress_or_decompress_token_account: Pubkey | None = None,
    token_program: Pubkey | None = None,
) -> list[AccountMeta]:
    # Unset optional accounts are passed as the program id
    def optional(key: Pubkey | None, writable: bool) -> AccountMeta:
        if key is None:
            return AccountMeta(COMPRESSED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False)
        return AccountMeta(key, is_signer=False, is_writable=writable)

    return [
        AccountMeta(fee_payer, is_signer=True, is_writable=True),
        AccountMeta(authority, is_signer=True, is_writable=False),
        AccountMeta(get_cpi_authority_pda(), is_signer=False, is_writable=False),
        AccountMeta(LIGHT_SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(REGISTERED_PROGRAM_PDA, is_signer=False, is_writable=False),
        AccountMeta(NOOP_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(get_account_compression_authority(), is_signer=False, is_writable=False),
        AccountMeta(ACCOUNT_COMPRESSION_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(COMPRESSED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        optional(token_pool_pda, True),
        optional(compress_or_decompress_token_account, True),
        optional(token_program, False),
        AccountMeta(SYS_PROGRAM_ID, is_signer=False, is_writable=False),
    ]


def _output(owner: Pubkey, amount: int, tree_index: int, lamports: int | None = None) -> dict[str, Any]:
    return {
        "owner": owner,
        "amount": amount,
        "lamports": lamports,
        "merkle_tree_index": tree_index,
        "tlv": None,
    }


def _proof(proof: CompressedProof | None) -> dict[str, bytes] | None:
    if proof is None:
        return None
    return {"a": proof.a, "b": proof.b, "c": proof.c}


def compress(
    payer: Pubkey,
    owner: Pubkey,
    source: Pubkey,
    to_address: Pubkey,
    amount: int,
    mint: Pubkey,
    output_state_tree_info: TreeInfo,
    token_pool_info: TokenPoolInfo,
) -> Instruction:
    """Build an instruction compressing `amount` SPL tokens from `source`.

    Args:
        payer: Fee payer.
        owner: Owner (and signer) of the source token account.
        source: SPL token account the tokens are taken from.
        to_address: Owner of the new compressed token account.
        amount: Amount in base units.
        mint: Token mint.
        output_state_tree_info: Writable state tree receiving the output.
        token_pool_info: Token pool of the mint.

    Returns:
        The compress Instruction.
    """
    remaining = _RemainingAccounts()
    tree_index = remaining.index_of(output_state_tree_info.tree)

    data = encode_transfer_data(
        {
            "proof": None,
            "mint": mint,
            "delegated_transfer": None,
            "input_token_data_with_context": [],
            "output_compressed_accounts": [_output(to_address, amount, tree_index)],
            "is_compress": True,
            "compress_or_decompress_amount": amount,
            "cpi_context": None,
            "lamports_change_account_merkle_tree_index": None,
        }
    )

    accounts = _transfer_accounts(
        fee_payer=payer,
        authority=owner,
        token_pool_pda=token_pool_info.token_pool_pda,
        compress_or_decompress_token_account=source,
        token_program=token_pool_info.token_program,
    )
    return Instruction(COMPRESSED_TOKEN_PROGRAM_ID, data, accounts + remaining.metas())


def transfer(
    payer: Pubkey,
    input_accounts: list[CompressedTokenAccount],
    input_tree_infos: list[TreeInfo],
    to_address: Pubkey,
    amount: int,
    root_indices: list[int],
    proof: CompressedProof | None,
) -> Instruction:
    """Build a compressed-to-compressed token transfer.

    Change goes back to the inputs' owner. Outputs are written to the first
    input's tree, or to its successor when that tree is full.

    Raises:
        ValueError: If inputs are empty, misaligned or insufficient.
    """
    if not input_accounts:
        raise ValueError("At least one input account is required")
    if len(input_accounts) != len(input_tree_infos) or len(input_accounts) != len(root_indices):
        raise ValueError("Input accounts, tree infos and root indices must align")

    owner = input_accounts[0].owner
    mint = input_accounts[0].mint
    input_total = sum(account.amount for account in input_accounts)
    if input_total < amount:
        raise ValueError(f"Insufficient input amount: {input_total} < {amount}")

    remaining = _RemainingAccounts()
    inputs = []
    for account, tree_info, root_index in zip(input_accounts, input_tree_infos, root_indices):
        inputs.append(
            {
                "amount": account.amount,
                "delegate_index": None,
                "merkle_context": {
                    "merkle_tree_pubkey_index": remaining.index_of(tree_info.tree),
                    "queue_pubkey_index": remaining.index_of(tree_info.queue),
                    "leaf_index": account.leaf_index,
                    "prove_by_index": False,
                },
                "root_index": root_index,
                "lamports": account.lamports or None,
                "tlv": None,
            }
        )

    output_tree_info = input_tree_infos[0].next_tree_info or input_tree_infos[0]
    tree_index = remaining.index_of(output_tree_info.tree)

    input_lamports = sum(account.lamports for account in input_accounts)
    change = input_total - amount
    if change > 0:
        outputs = [
            _output(to_address, amount, tree_index),
            _output(owner, change, tree_index, input_lamports or None),
        ]
    else:
        outputs = [_output(to_address, amount, tree_index, input_lamports or None)]

    data = encode_transfer_data(
        {
            "proof": _proof(proof),
            "mint": mint,
            "delegated_transfer": None,
            "input_token_data_with_context": inputs,
            "output_compressed_accounts": outputs,
            "is_compress": False,
            "compress_or_decompress_amount": None,
            "cpi_context": None,
            "lamports_change_account_merkle_tree_index": None,
        }
    )

    accounts = _transfer_accounts(fee_payer=payer, authority=owner)
    return Instruction(COMPRESSED_TOKEN_PROGRAM_ID, data, accounts + remaining.metas())
