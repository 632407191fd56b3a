"""Tests for the standard and compressed fee probes against a fake backend."""

from types import SimpleNamespace

from solders.instruction import AccountMeta, Instruction
from solders.system_program import ID as SYS_PROGRAM_ID
from solders.system_program import decode_transfer
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID
from spl.token.instructions import get_associated_token_address

from conftest import decompile
from zkfee.constants import NATIVE_SOL_MINT, TEST_AMOUNT_LAMPORTS
from zkfee.light.constants import COMPRESSED_TOKEN_PROGRAM_ID
from zkfee.probes import CompressedTransferProbe, StandardTransferProbe


def programs(tx):
    return [program for program, _, _ in decompile(tx)]


def system_transfers(tx):
    """Decode every system transfer in a transaction."""
    transfers = []
    for program, data, keys in decompile(tx):
        if program != SYS_PROGRAM_ID:
            continue
        ix = Instruction(program, data, [AccountMeta(key, False, False) for key in keys])
        transfers.append(decode_transfer(ix))
    return transfers


class TestStandardTransferProbe:
    def test_test_amount(self):
        assert TEST_AMOUNT_LAMPORTS == 1_000_000

    def test_submits_single_transfer(self, chain, wallet, recipient):
        """Exactly one transaction moving the test amount to the recipient."""
        StandardTransferProbe(chain, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()

        assert len(chain.sent) == 1
        transfers = system_transfers(chain.sent[0])
        assert len(transfers) == 1
        assert transfers[0]["from_pubkey"] == wallet.pubkey()
        assert transfers[0]["to_pubkey"] == recipient
        assert transfers[0]["lamports"] == 1_000_000

    def test_reports_backend_fee(self, chain, wallet, recipient):
        chain.standard_fee = 6123
        result = StandardTransferProbe(chain, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()

        assert result.label == "Standard Transfer"
        assert result.fee == 6123
        assert result.fee_sol == "0.000006123"
        assert result.signature == str(chain.sent[0].signatures[0])
        assert result.explorer_url.endswith(result.signature)

    def test_waits_for_confirmation(self, chain, wallet, recipient):
        StandardTransferProbe(chain, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()
        assert chain.confirmed == [chain.sent[0].signatures[0]]

    def test_missing_transaction_record_reports_zero(self, chain, wallet, recipient):
        chain.get_transaction = lambda *args, **kwargs: SimpleNamespace(value=None)
        result = StandardTransferProbe(chain, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()
        assert result.fee == 0


class TestWrapStep:
    """The token account is created only when it does not exist yet."""

    def test_creates_account_when_missing(self, chain, light_rpc, wallet, recipient):
        probe = CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS)
        probe.wrap()

        assert len(chain.sent) == 1
        tx = chain.sent[0]
        assert programs(tx) == [ASSOCIATED_TOKEN_PROGRAM_ID, SYS_PROGRAM_ID, TOKEN_PROGRAM_ID]

        (fund,) = system_transfers(tx)
        assert fund["to_pubkey"] == get_associated_token_address(wallet.pubkey(), NATIVE_SOL_MINT)
        assert fund["lamports"] == 2 * TEST_AMOUNT_LAMPORTS

    def test_funds_existing_account(self, chain, light_rpc, wallet, recipient):
        ata = get_associated_token_address(wallet.pubkey(), NATIVE_SOL_MINT)
        chain.accounts[ata] = SimpleNamespace(owner=TOKEN_PROGRAM_ID, data=bytes(165))

        probe = CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS)
        probe.wrap()

        assert len(chain.sent) == 1
        tx = chain.sent[0]
        assert ASSOCIATED_TOKEN_PROGRAM_ID not in programs(tx)
        assert programs(tx) == [SYS_PROGRAM_ID, TOKEN_PROGRAM_ID]
        assert system_transfers(tx)[0]["lamports"] == 2 * TEST_AMOUNT_LAMPORTS


class TestCompressedTransferProbe:
    def test_three_transactions_in_order(self, chain, light_rpc, wallet, recipient):
        CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()

        assert len(chain.sent) == 3
        wrap_tx, compress_tx, transfer_tx = chain.sent
        assert COMPRESSED_TOKEN_PROGRAM_ID not in programs(wrap_tx)
        assert COMPRESSED_TOKEN_PROGRAM_ID in programs(compress_tx)
        assert COMPRESSED_TOKEN_PROGRAM_ID in programs(transfer_tx)

    def test_compresses_double_and_transfers_single(self, chain, light_rpc, wallet, recipient):
        """2x is compressed, 1x is sent, 1x stays compressed with the wallet."""
        CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()

        assert light_rpc.compress_amounts == [2 * TEST_AMOUNT_LAMPORTS]
        assert light_rpc.transfer_amounts == [TEST_AMOUNT_LAMPORTS]
        assert light_rpc.balance_of(recipient) == TEST_AMOUNT_LAMPORTS
        assert light_rpc.balance_of(wallet.pubkey()) == TEST_AMOUNT_LAMPORTS

    def test_compress_confirmed_twice(self, chain, light_rpc, wallet, recipient):
        """Compress is confirmed by the light client and again on the connection."""
        probe = CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS)
        probe.wrap()
        signature = probe.compress()
        assert chain.confirmed.count(signature) == 2

    def test_compress_targets_active_tree(self, chain, light_rpc, wallet, recipient):
        probe = CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS)
        probe.compress()

        _, _, keys = [entry for entry in decompile(chain.sent[0]) if entry[0] == COMPRESSED_TOKEN_PROGRAM_ID][0]
        assert light_rpc.active_tree.tree in keys
        assert light_rpc.full_tree.tree not in keys

    def test_reports_final_transfer_fee(self, chain, light_rpc, wallet, recipient):
        chain.compressed_fee = 7000
        result = CompressedTransferProbe(chain, light_rpc, wallet, recipient, TEST_AMOUNT_LAMPORTS).run()

        assert result.label == "Compressed Transfer"
        assert result.fee == 7000
        assert result.signature == str(chain.sent[-1].signatures[0])
