"""Borsh layouts for the compressed-token program."""

from construct import (  # type: ignore
    Adapter,
    Bytes,
    Flag,
    GreedyBytes,
    If,
    Int8ul,
    Int16ul,
    Int32ul,
    Int64ul,
    Prefixed,
    PrefixedArray,
    Struct,
    this,
)
from solders.pubkey import Pubkey  # type: ignore


class _PublicKey(Adapter):
    def _decode(self, obj, context, path):
        return Pubkey.from_bytes(obj)

    def _encode(self, obj, context, path):
        return bytes(obj)


class _Option(Adapter):
    """Borsh Option<T>: a one byte tag followed by T when present."""

    def __init__(self, subcon):
        super().__init__(Struct("is_some" / Flag, "value" / If(this.is_some, subcon)))

    def _decode(self, obj, context, path):
        return obj.value if obj.is_some else None

    def _encode(self, obj, context, path):
        return {"is_some": obj is not None, "value": obj}


PUBLIC_KEY = _PublicKey(Bytes(32))

COMPRESSED_PROOF_LAYOUT = Struct(
    "a" / Bytes(32),
    "b" / Bytes(64),
    "c" / Bytes(32),
)

DELEGATED_TRANSFER_LAYOUT = Struct(
    "owner" / PUBLIC_KEY,
    "delegate_change_account_index" / _Option(Int8ul),
)

PACKED_MERKLE_CONTEXT_LAYOUT = Struct(
    "merkle_tree_pubkey_index" / Int8ul,
    "queue_pubkey_index" / Int8ul,
    "leaf_index" / Int32ul,
    "prove_by_index" / Flag,
)

INPUT_TOKEN_DATA_WITH_CONTEXT_LAYOUT = Struct(
    "amount" / Int64ul,
    "delegate_index" / _Option(Int8ul),
    "merkle_context" / PACKED_MERKLE_CONTEXT_LAYOUT,
    "root_index" / Int16ul,
    "lamports" / _Option(Int64ul),
    "tlv" / _Option(Prefixed(Int32ul, GreedyBytes)),
)

PACKED_TOKEN_TRANSFER_OUTPUT_DATA_LAYOUT = Struct(
    "owner" / PUBLIC_KEY,
    "amount" / Int64ul,
    "lamports" / _Option(Int64ul),
    "merkle_tree_index" / Int8ul,
    "tlv" / _Option(Prefixed(Int32ul, GreedyBytes)),
)

CPI_CONTEXT_LAYOUT = Struct(
    "set_context" / Flag,
    "first_set_context" / Flag,
    "cpi_context_account_index" / Int8ul,
)

TRANSFER_DATA_LAYOUT = Struct(
    "proof" / _Option(COMPRESSED_PROOF_LAYOUT),
    "mint" / PUBLIC_KEY,
    "delegated_transfer" / _Option(DELEGATED_TRANSFER_LAYOUT),
    "input_token_data_with_context" / PrefixedArray(Int32ul, INPUT_TOKEN_DATA_WITH_CONTEXT_LAYOUT),
    "output_compressed_accounts" / PrefixedArray(Int32ul, PACKED_TOKEN_TRANSFER_OUTPUT_DATA_LAYOUT),
    "is_compress" / Flag,
    "compress_or_decompress_amount" / _Option(Int64ul),
    "cpi_context" / _Option(CPI_CONTEXT_LAYOUT),
    "lamports_change_account_merkle_tree_index" / _Option(Int8ul),
)

# Leading fields of an SPL token account
TOKEN_ACCOUNT_LAYOUT = Struct(
    "mint" / PUBLIC_KEY,
    "owner" / PUBLIC_KEY,
    "amount" / Int64ul,
)
