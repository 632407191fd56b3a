"""Constants for the ZK compression fee comparison."""

from spl.token.constants import WRAPPED_SOL_MINT  # type: ignore

# Native SOL mint (wrapped SOL)
NATIVE_SOL_MINT = WRAPPED_SOL_MINT

LAMPORTS_PER_SOL = 1_000_000_000

# 0.001 SOL per test
TEST_AMOUNT_SOL = 0.001
TEST_AMOUNT_LAMPORTS = int(TEST_AMOUNT_SOL * LAMPORTS_PER_SOL)

# Compressed amount is twice the transferred amount
COMPRESS_MULTIPLIER = 2

# Compute unit limits
COMPRESS_COMPUTE_UNIT_LIMIT = 1_000_000
TRANSFER_COMPUTE_UNIT_LIMIT = 500_000

# Pause between the two probes (in seconds)
PROBE_DELAY_SECONDS = 5

# Phantom / Solflare default derivation path
DERIVATION_PATH = "m/44'/501'/0'/0'"

HELIUS_MAINNET_RPC_URL = "https://mainnet.helius-rpc.com/?api-key={api_key}"
EXPLORER_TX_URL = "https://solscan.io/tx/{signature}"

# Environment variables
ENV_API_KEY = "HELIUS_API_KEY"
ENV_MNEMONIC = "TEST_WALLET_MNEMONIC"
ENV_RECIPIENT = "TEST_RECIPIENT_ADDRESS"
ENV_RPC_URL = "SOLANA_RPC_URL"

# Probe labels
LABEL_STANDARD = "Standard Transfer"
LABEL_COMPRESSED = "Compressed Transfer"
