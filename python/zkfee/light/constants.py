"""Constants for Light Protocol compressed tokens."""

from solders.pubkey import Pubkey  # type: ignore

# Program IDs
COMPRESSED_TOKEN_PROGRAM_ID = Pubkey.from_string("cTokenmWW8bLPjZEBAUgYy3zKxQZW6VKi7bqNFEVv7m")
LIGHT_SYSTEM_PROGRAM_ID = Pubkey.from_string("SySTEM1eSU2p4BGQfQpimFEWWSC1XDFeun3Nqzz3rT7")
ACCOUNT_COMPRESSION_PROGRAM_ID = Pubkey.from_string("compr6CUsB5m2jS4Y3831ztGSTnDpnKJTKS95d64XVq")
NOOP_PROGRAM_ID = Pubkey.from_string("noopb9bkMVfRPU8AsbpTUg8AQkHtKwMYZiFUjNRtMmV")
REGISTERED_PROGRAM_PDA = Pubkey.from_string("35hkDgaAKwMCaxRz2ocSZ6NaUrtKkyNqU6c4RV3tYJRh")

# PDA seeds
CPI_AUTHORITY_SEED = b"cpi_authority"
POOL_SEED = b"pool"

# Pool index 0 has no index byte in its seeds
MAX_TOKEN_POOLS = 5

# Mainnet state tree address lookup tables
STATE_TREE_LOOKUP_TABLE_MAINNET = Pubkey.from_string("7i86eQs3GSqHjN47WdWLTCGMW6gde1q96G2EVnUyK2KH")
NULLIFIED_STATE_TREE_LOOKUP_TABLE_MAINNET = Pubkey.from_string(
    "H9QD4u1fG7KmkAzn2tDXhheushxFe1EcrjGGyEFXeMqT"
)

# Address lookup table metadata precedes the address list
LOOKUP_TABLE_META_SIZE = 56

TREE_TYPE_STATE_V1 = "StateV1"

# Photon indexer JSON-RPC methods
METHOD_GET_COMPRESSED_TOKEN_ACCOUNTS_BY_OWNER = "getCompressedTokenAccountsByOwner"
METHOD_GET_VALIDITY_PROOF = "getValidityProof"
METHOD_GET_INDEXER_SLOT = "getIndexerSlot"

# Bounded wait for the indexer to catch up with a confirmed slot
INDEXER_WAIT_TIMEOUT_SECONDS = 20.0
INDEXER_POLL_INTERVAL_SECONDS = 0.2

# The prover only accepts fixed input counts
MAX_TRANSFER_INPUTS = 4
