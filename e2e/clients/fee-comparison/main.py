"""ZK Compression Fee Test on Solana Mainnet.

Compares transaction fees between a standard SOL transfer and a Light
Protocol compressed SOL transfer sent from the same wallet.

Expected result: both cost 5,000 lamports per transfer. The "98% savings"
refers to account creation costs, not transaction fees.

Requires HELIUS_API_KEY, TEST_WALLET_MNEMONIC and TEST_RECIPIENT_ADDRESS,
and a wallet holding ~0.5 SOL on mainnet.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Get environment variables
api_key = os.getenv("HELIUS_API_KEY", "")
recipient = os.getenv("TEST_RECIPIENT_ADDRESS", "")

if not api_key or not recipient:
    print("Missing required environment variables: HELIUS_API_KEY, TEST_RECIPIENT_ADDRESS")
    sys.exit(1)


if __name__ == "__main__":
    from zkfee.runner import main

    main()
