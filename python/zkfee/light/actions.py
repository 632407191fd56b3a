"""High level compressed-token actions."""

from typing import Protocol, Sequence

from loguru import logger
from solders.compute_budget import set_compute_unit_limit  # type: ignore
from solders.hash import Hash  # type: ignore
from solders.instruction import Instruction  # type: ignore
from solders.keypair import Keypair  # type: ignore
from solders.message import MessageV0  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore
from solders.transaction import VersionedTransaction  # type: ignore

from ..constants import TRANSFER_COMPUTE_UNIT_LIMIT
from . import instructions
from .constants import MAX_TRANSFER_INPUTS
from .types import CompressedTokenAccount, TokenPoolInfo, TreeInfo, ValidityProof


class CompressionRpc(Protocol):
    """Operations the actions need from a compression-aware RPC."""

    def get_state_tree_infos(self) -> list[TreeInfo]:
        ...

    def get_token_pool_infos(self, mint: Pubkey) -> list[TokenPoolInfo]:
        ...

    def get_compressed_token_accounts_by_owner(
        self, owner: Pubkey, mint: Pubkey | None = None
    ) -> list[CompressedTokenAccount]:
        ...

    def get_validity_proof(self, hashes: list[str]) -> ValidityProof:
        ...

    def get_latest_blockhash(self) -> Hash:
        ...

    def send_and_confirm_tx(self, tx: VersionedTransaction) -> Signature:
        ...


def build_and_sign_tx(
    instructions_: Sequence[Instruction],
    payer: Keypair,
    blockhash: Hash,
    additional_signers: Sequence[Keypair] = (),
) -> VersionedTransaction:
    """Compile a v0 transaction and sign it with the payer and extra signers."""
    message = MessageV0.try_compile(payer.pubkey(), list(instructions_), [], blockhash)
    signers = [payer]
    for signer in additional_signers:
        if signer.pubkey() != payer.pubkey():
            signers.append(signer)
    return VersionedTransaction(message, signers)


def select_min_accounts_for_transfer(
    accounts: list[CompressedTokenAccount],
    amount: int,
    max_inputs: int = MAX_TRANSFER_INPUTS,
) -> list[CompressedTokenAccount]:
    """Pick the fewest accounts, largest first, covering `amount`.

    Raises:
        ValueError: If the accounts hold less than `amount` in total, or
            covering it takes more than `max_inputs` accounts.
    """
    selected: list[CompressedTokenAccount] = []
    total = 0
    for account in sorted(accounts, key=lambda a: a.amount, reverse=True):
        if total >= amount:
            break
        selected.append(account)
        total += account.amount

    if total < amount:
        available = sum(a.amount for a in accounts)
        raise ValueError(
            f"Insufficient balance for transfer. Required: {amount}, available: {available}"
        )
    if len(selected) > max_inputs:
        covered = sum(a.amount for a in selected[:max_inputs])
        raise ValueError(
            f"Account limit exceeded: max {max_inputs} inputs per transfer, "
            f"{len(selected)} needed. The largest {max_inputs} hold {covered}; "
            "merge accounts or split the transfer"
        )
    return selected


def _tree_info_for(tree: Pubkey, tree_infos: list[TreeInfo]) -> TreeInfo:
    for info in tree_infos:
        if info.tree == tree:
            return info
    raise ValueError(f"Unknown state tree: {tree}")


def transfer(
    rpc: CompressionRpc,
    payer: Keypair,
    mint: Pubkey,
    amount: int,
    owner: Keypair,
    to_address: Pubkey,
) -> Signature:
    """Transfer compressed tokens from `owner` to `to_address`.

    Blocks until the transaction is confirmed.

    Returns:
        The transaction signature.
    """
    accounts = rpc.get_compressed_token_accounts_by_owner(owner.pubkey(), mint)
    inputs = select_min_accounts_for_transfer(accounts, amount)
    logger.debug("Spending {} compressed account(s) for {} base units", len(inputs), amount)

    tree_infos = rpc.get_state_tree_infos()
    input_tree_infos = [_tree_info_for(account.tree, tree_infos) for account in inputs]

    proof = rpc.get_validity_proof([account.hash for account in inputs])

    ix = instructions.transfer(
        payer=payer.pubkey(),
        input_accounts=inputs,
        input_tree_infos=input_tree_infos,
        to_address=to_address,
        amount=amount,
        root_indices=proof.root_indices,
        proof=proof.compressed_proof,
    )

    blockhash = rpc.get_latest_blockhash()
    tx = build_and_sign_tx(
        [set_compute_unit_limit(TRANSFER_COMPUTE_UNIT_LIMIT), ix],
        payer,
        blockhash,
        [owner],
    )
    return rpc.send_and_confirm_tx(tx)
