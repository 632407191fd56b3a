"""Standard (native SOL) transfer fee probe."""

from loguru import logger
from solana.rpc.api import Client
from solders.keypair import Keypair  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.system_program import TransferParams, transfer  # type: ignore

from ..constants import LABEL_STANDARD
from ..types import ProbeResult
from ..utils import fetch_fee, send_and_confirm_transaction


class StandardTransferProbe:
    """Sends one native SOL transfer and reads back the fee it paid."""

    label = LABEL_STANDARD

    def __init__(self, connection: Client, wallet: Keypair, recipient: Pubkey, lamports: int):
        self._connection = connection
        self._wallet = wallet
        self._recipient = recipient
        self._lamports = lamports

    def run(self) -> ProbeResult:
        logger.info("TEST 1: Standard SOL Transfer")

        transfer_ix = transfer(
            TransferParams(
                from_pubkey=self._wallet.pubkey(),
                to_pubkey=self._recipient,
                lamports=self._lamports,
            )
        )
        signature = send_and_confirm_transaction(self._connection, [transfer_ix], [self._wallet])
        logger.info("Transaction confirmed: {}", signature)

        result = ProbeResult.from_fee(self.label, str(signature), fetch_fee(self._connection, signature))
        logger.info("Fee paid: {} lamports ({} SOL)", result.fee, result.fee_sol)
        return result
