"""ZK compressed token transfer fee probe.

Wraps SOL into the wallet's token account, compresses it, then sends a
compressed transfer. Only the final transfer's fee is reported. Each step
blocks on confirmation and nothing is rolled back if a later step fails.
"""

from loguru import logger
from solana.rpc.api import Client
from solders.compute_budget import set_compute_unit_limit  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore
from solders.system_program import TransferParams  # type: ignore
from solders.system_program import transfer as system_transfer  # type: ignore
from spl.token.constants import TOKEN_PROGRAM_ID  # type: ignore
from spl.token.instructions import (  # type: ignore
    SyncNativeParams,
    create_associated_token_account,
    get_associated_token_address,
    sync_native,
)

from ..constants import (
    COMPRESS_COMPUTE_UNIT_LIMIT,
    COMPRESS_MULTIPLIER,
    LABEL_COMPRESSED,
    NATIVE_SOL_MINT,
)
from ..light import actions as light_actions
from ..light import instructions as light_instructions
from ..light.actions import CompressionRpc, build_and_sign_tx
from ..types import ProbeResult
from ..utils import confirm_transaction, fetch_fee, send_and_confirm_transaction


class CompressedTransferProbe:
    """Measures the fee of a compressed wrapped-SOL transfer."""

    label = LABEL_COMPRESSED

    def __init__(
        self,
        connection: Client,
        light_rpc: CompressionRpc,
        wallet: Keypair,
        recipient: Pubkey,
        lamports: int,
        mint: Pubkey = NATIVE_SOL_MINT,
    ):
        self._connection = connection
        self._light_rpc = light_rpc
        self._wallet = wallet
        self._recipient = recipient
        self._mint = mint
        self._transfer_amount = lamports
        self._compress_amount = lamports * COMPRESS_MULTIPLIER

    @property
    def token_account(self) -> Pubkey:
        return get_associated_token_address(self._wallet.pubkey(), self._mint)

    def run(self) -> ProbeResult:
        logger.info("TEST 2: ZK Compressed SOL Transfer")

        self.wrap()
        self.compress()
        signature = self.transfer()

        result = ProbeResult.from_fee(self.label, str(signature), fetch_fee(self._connection, signature))
        logger.info("Fee paid: {} lamports ({} SOL)", result.fee, result.fee_sol)
        return result

    def wrap(self) -> Signature:
        """Fund the wallet's wrapped SOL account, creating it if missing."""
        logger.info("Step 1: Setting up wrapped SOL token account...")
        owner = self._wallet.pubkey()
        token_account = self.token_account

        fund_ix = system_transfer(
            TransferParams(from_pubkey=owner, to_pubkey=token_account, lamports=self._compress_amount)
        )
        sync_ix = sync_native(SyncNativeParams(program_id=TOKEN_PROGRAM_ID, account=token_account))

        account_info = self._connection.get_account_info(token_account).value
        if account_info is None:
            create_ix = create_associated_token_account(payer=owner, owner=owner, mint=self._mint)
            signature = send_and_confirm_transaction(
                self._connection, [create_ix, fund_ix, sync_ix], [self._wallet]
            )
            logger.info("Token account created and funded: {}", signature)
        else:
            signature = send_and_confirm_transaction(self._connection, [fund_ix, sync_ix], [self._wallet])
            logger.info("Token account funded: {}", signature)
        return signature

    def compress(self) -> Signature:
        """Compress the wrapped balance into the active state tree."""
        logger.info("Step 2: Compressing SOL (this creates compressed token accounts)...")

        tree_infos = self._light_rpc.get_state_tree_infos()
        active = [info for info in tree_infos if info.next_tree_info is None]
        if not active:
            raise ValueError("No writable state tree available")
        tree_info = active[0]

        token_pool_info = self._light_rpc.get_token_pool_infos(self._mint)[0]

        compress_ix = light_instructions.compress(
            payer=self._wallet.pubkey(),
            owner=self._wallet.pubkey(),
            source=self.token_account,
            to_address=self._wallet.pubkey(),
            amount=self._compress_amount,
            mint=self._mint,
            output_state_tree_info=tree_info,
            token_pool_info=token_pool_info,
        )

        blockhash = self._connection.get_latest_blockhash().value.blockhash
        tx = build_and_sign_tx(
            [set_compute_unit_limit(COMPRESS_COMPUTE_UNIT_LIMIT), compress_ix],
            self._wallet,
            blockhash,
        )

        signature = self._light_rpc.send_and_confirm_tx(tx)
        logger.info("SOL compressed: {}", signature)

        confirm_transaction(self._connection, signature)
        return signature

    def transfer(self) -> Signature:
        """Send the compressed transfer to the recipient."""
        logger.info("Step 3: Transferring compressed SOL...")

        signature = light_actions.transfer(
            self._light_rpc,
            self._wallet,
            self._mint,
            self._transfer_amount,
            self._wallet,
            self._recipient,
        )
        logger.info("Transfer confirmed: {}", signature)

        confirm_transaction(self._connection, signature)
        return signature
