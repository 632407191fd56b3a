"""Chain helpers shared by the fee probes."""

from typing import Any, Sequence

from loguru import logger
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solders.instruction import Instruction  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.message import Message  # type: ignore
from solders.rpc.responses import GetSignatureStatusesResp  # type: ignore
from solders.signature import Signature  # type: ignore
from solders.transaction import Transaction  # type: ignore


class TransactionFailedError(RuntimeError):
    """A transaction landed on chain but its execution failed."""

    def __init__(self, signature: Signature, err: Any):
        super().__init__(f"Transaction {signature} failed: {err}")
        self.signature = signature
        self.err = err


def confirm_transaction(connection: Client, signature: Signature) -> GetSignatureStatusesResp:
    """Block until `signature` is confirmed and check that it succeeded.

    Raises:
        TransactionFailedError: If the confirmed status carries an error.
    """
    resp = connection.confirm_transaction(signature, commitment=Confirmed)
    status = resp.value[0] if resp.value else None
    if status is not None and status.err is not None:
        raise TransactionFailedError(signature, status.err)
    return resp


def send_and_confirm_transaction(
    connection: Client,
    instructions: Sequence[Instruction],
    signers: Sequence[Keypair],
) -> Signature:
    """Sign a legacy transaction, submit it and block until confirmed.

    The first signer pays the fee.

    Returns:
        The transaction signature.
    """
    payer = signers[0]
    blockhash = connection.get_latest_blockhash().value.blockhash

    tx = Transaction(
        from_keypairs=list(signers),
        message=Message(list(instructions), payer.pubkey()),
        recent_blockhash=blockhash,
    )

    signature = connection.send_transaction(tx).value
    confirm_transaction(connection, signature)
    return signature


def fetch_fee(connection: Client, signature: Signature) -> int:
    """Fetch a confirmed transaction and return the fee it paid, in lamports."""
    resp = connection.get_transaction(
        signature,
        commitment=Confirmed,
        max_supported_transaction_version=0,
    )
    fee = extract_fee(resp.value)
    if fee is None:
        logger.warning("No fee metadata for {}, reporting 0", signature)
        return 0
    return fee


def extract_fee(tx_record: Any) -> int | None:
    """Read meta.fee from a transaction record; None if it is missing."""
    if tx_record is None:
        return None
    tx_with_meta = getattr(tx_record, "transaction", None)
    meta = getattr(tx_with_meta, "meta", None)
    if meta is None:
        return None
    return int(meta.fee)
