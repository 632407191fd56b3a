"""In-memory chain and compression backends for zkfee tests.

Nothing here touches a network. FakeChain stands in for the solana-py
Client; FakeLightRpc stands in for LightRpc and keeps compressed balances
by decoding the compressed-token instructions it is sent.
"""

from types import SimpleNamespace

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.constants import TOKEN_PROGRAM_ID

from zkfee.config import ProbeConfig
from zkfee.light.constants import COMPRESSED_TOKEN_PROGRAM_ID, TREE_TYPE_STATE_V1
from zkfee.light.instructions import decode_transfer_data, derive_token_pool_pda
from zkfee.light.types import (
    CompressedProof,
    CompressedTokenAccount,
    TokenPoolInfo,
    TreeInfo,
    ValidityProof,
)
from zkfee.utils import confirm_transaction
from zkfee.wallet import load_wallet

TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)


def decompile(tx):
    """Yield (program_id, data, account keys) for each instruction of a tx."""
    keys = tx.message.account_keys
    for ix in tx.message.instructions:
        yield keys[ix.program_id_index], bytes(ix.data), [keys[i] for i in ix.accounts]


class FakeChain:
    """Records submissions and serves fees, accounts and blockhashes."""

    def __init__(self, standard_fee=5000, compressed_fee=5000, balance=500_000_000):
        self.standard_fee = standard_fee
        self.compressed_fee = compressed_fee
        self.balance = balance
        self.accounts = {}
        self.sent = []
        self.confirmed = []
        self.fees = {}
        self.send_error = None
        self.confirm_error = None
        self.tx_error = None
        self.slot = 100

    def get_latest_blockhash(self):
        return SimpleNamespace(value=SimpleNamespace(blockhash=Hash.new_unique(), last_valid_block_height=1))

    def get_balance(self, pubkey):
        return SimpleNamespace(value=self.balance)

    def get_account_info(self, pubkey):
        return SimpleNamespace(value=self.accounts.get(pubkey))

    def get_multiple_accounts(self, pubkeys):
        return SimpleNamespace(value=[self.accounts.get(pubkey) for pubkey in pubkeys])

    def send_transaction(self, tx, opts=None):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(tx)
        signature = tx.signatures[0]
        is_compressed = any(program == COMPRESSED_TOKEN_PROGRAM_ID for program, _, _ in decompile(tx))
        self.fees[signature] = self.compressed_fee if is_compressed else self.standard_fee
        return SimpleNamespace(value=signature)

    def confirm_transaction(self, signature, commitment=None, sleep_seconds=0.5):
        if self.confirm_error is not None:
            raise self.confirm_error
        self.confirmed.append(signature)
        status = SimpleNamespace(confirmation_status="confirmed", err=self.tx_error)
        return SimpleNamespace(context=SimpleNamespace(slot=self.slot), value=[status])

    def get_transaction(self, signature, encoding="json", commitment=None, max_supported_transaction_version=None):
        fee = self.fees.get(signature)
        if fee is None:
            return SimpleNamespace(value=None)
        meta = SimpleNamespace(fee=fee)
        return SimpleNamespace(value=SimpleNamespace(transaction=SimpleNamespace(meta=meta)))


class FakeLightRpc:
    """Compression backend sharing a FakeChain for submission."""

    def __init__(self, chain):
        self.chain = chain
        self.active_tree = TreeInfo(
            tree=Pubkey.new_unique(),
            queue=Pubkey.new_unique(),
            cpi_context=Pubkey.new_unique(),
            tree_type=TREE_TYPE_STATE_V1,
        )
        self.full_tree = TreeInfo(
            tree=Pubkey.new_unique(),
            queue=Pubkey.new_unique(),
            cpi_context=Pubkey.new_unique(),
            tree_type=TREE_TYPE_STATE_V1,
            next_tree_info=self.active_tree,
        )
        self.compressed = []
        self.compress_amounts = []
        self.transfer_amounts = []
        self.indexer_slot = None
        self.closed = False
        self._next_leaf = 0

    def get_state_tree_infos(self):
        return [self.full_tree, self.active_tree]

    def get_token_pool_infos(self, mint):
        pda, bump = derive_token_pool_pda(mint)
        return [
            TokenPoolInfo(
                mint=mint,
                token_pool_pda=pda,
                token_program=TOKEN_PROGRAM_ID,
                is_initialized=True,
                balance=0,
                pool_index=0,
                bump=bump,
            )
        ]

    def get_compressed_token_accounts_by_owner(self, owner, mint=None):
        return [
            account
            for account in self.compressed
            if account.owner == owner and (mint is None or account.mint == mint)
        ]

    def get_validity_proof(self, hashes):
        proof = CompressedProof(a=bytes(32), b=bytes(64), c=bytes(32))
        return ValidityProof(compressed_proof=proof, root_indices=[7] * len(hashes))

    def get_latest_blockhash(self):
        return self.chain.get_latest_blockhash().value.blockhash

    def get_indexer_slot(self):
        return self.indexer_slot if self.indexer_slot is not None else self.chain.slot

    def send_and_confirm_tx(self, tx):
        signature = self.chain.send_transaction(tx).value
        resp = confirm_transaction(self.chain, signature)
        if self.get_indexer_slot() < resp.context.slot:
            raise TimeoutError(f"Indexer did not reach slot {resp.context.slot}")
        for program, data, _ in decompile(tx):
            if program == COMPRESSED_TOKEN_PROGRAM_ID:
                self._apply(decode_transfer_data(data))
        return signature

    def close(self):
        self.closed = True

    def balance_of(self, owner):
        return sum(account.amount for account in self.compressed if account.owner == owner)

    def _apply(self, data):
        if data.is_compress:
            self.compress_amounts.append(data.compress_or_decompress_amount)
        else:
            spent = {ctx.merkle_context.leaf_index for ctx in data.input_token_data_with_context}
            self.compressed = [a for a in self.compressed if a.leaf_index not in spent]
            self.transfer_amounts.append(data.output_compressed_accounts[0].amount)

        for output in data.output_compressed_accounts:
            self.compressed.append(
                CompressedTokenAccount(
                    hash=str(Hash.new_unique()),
                    tree=self.active_tree.tree,
                    leaf_index=self._next_leaf,
                    owner=output.owner,
                    mint=data.mint,
                    amount=output.amount,
                )
            )
            self._next_leaf += 1


@pytest.fixture
def chain():
    return FakeChain()


@pytest.fixture
def light_rpc(chain):
    return FakeLightRpc(chain)


@pytest.fixture
def wallet():
    return load_wallet(TEST_MNEMONIC)


@pytest.fixture
def recipient():
    return Keypair().pubkey()


@pytest.fixture
def config(recipient):
    return ProbeConfig(api_key="test-key", recipient=str(recipient), mnemonic=TEST_MNEMONIC)
