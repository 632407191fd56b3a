"""RPC client for Light Protocol compression.

Standard chain calls go through solana-py; indexer (Photon) calls are
JSON-RPC over httpx against the same endpoint.
"""

import itertools
import time
from typing import Any

import httpx
from loguru import logger
from solana.rpc.api import Client
from solana.rpc.commitment import Confirmed
from solders.hash import Hash  # type: ignore
from solders.pubkey import Pubkey  # type: ignore
from solders.signature import Signature  # type: ignore
from solders.transaction import VersionedTransaction  # type: ignore

from ..utils import confirm_transaction
from ._layouts import TOKEN_ACCOUNT_LAYOUT
from .constants import (
    INDEXER_POLL_INTERVAL_SECONDS,
    INDEXER_WAIT_TIMEOUT_SECONDS,
    LOOKUP_TABLE_META_SIZE,
    MAX_TOKEN_POOLS,
    METHOD_GET_COMPRESSED_TOKEN_ACCOUNTS_BY_OWNER,
    METHOD_GET_INDEXER_SLOT,
    METHOD_GET_VALIDITY_PROOF,
    NULLIFIED_STATE_TREE_LOOKUP_TABLE_MAINNET,
    STATE_TREE_LOOKUP_TABLE_MAINNET,
    TREE_TYPE_STATE_V1,
)
from .instructions import derive_token_pool_pda
from .types import CompressedTokenAccount, TokenPoolInfo, TreeInfo, ValidityProof


class LightRpcError(RuntimeError):
    """JSON-RPC error object returned by the compression indexer."""

    def __init__(self, method: str, code: int, message: str):
        super().__init__(f"{method} failed ({code}): {message}")
        self.method = method
        self.code = code
        self.message = message


def parse_lookup_table_addresses(data: bytes) -> list[Pubkey]:
    """Return the addresses stored in an address lookup table account."""
    body = data[LOOKUP_TABLE_META_SIZE:]
    return [Pubkey.from_bytes(body[i : i + 32]) for i in range(0, len(body) - len(body) % 32, 32)]


class LightRpc:
    """Compression-aware RPC.

    Args:
        endpoint: HTTPS RPC URL serving both Solana and Photon methods.
        connection: Optional solana-py Client; created from endpoint if omitted.
        http: Optional httpx Client used for indexer requests.
        state_tree_lookup_table: Lookup table listing state trees.
        nullified_lookup_table: Lookup table listing full (nullified) trees.
    """

    def __init__(
        self,
        endpoint: str,
        connection: Client | None = None,
        http: httpx.Client | None = None,
        state_tree_lookup_table: Pubkey = STATE_TREE_LOOKUP_TABLE_MAINNET,
        nullified_lookup_table: Pubkey = NULLIFIED_STATE_TREE_LOOKUP_TABLE_MAINNET,
    ):
        self._endpoint = endpoint
        self._connection = connection if connection is not None else Client(endpoint, commitment=Confirmed)
        self._http = http if http is not None else httpx.Client(timeout=30.0)
        self._state_tree_lookup_table = state_tree_lookup_table
        self._nullified_lookup_table = nullified_lookup_table
        self._request_ids = itertools.count(1)
        self._tree_infos: list[TreeInfo] | None = None

    @property
    def connection(self) -> Client:
        return self._connection

    def _call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        request: dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
        }
        if params is not None:
            request["params"] = params
        response = self._http.post(self._endpoint, json=request)
        response.raise_for_status()
        body = response.json()

        if "error" in body:
            error = body["error"]
            raise LightRpcError(method, int(error.get("code", 0)), str(error.get("message", "")))
        return body["result"]

    # --- Indexer queries ---

    def get_compressed_token_accounts_by_owner(
        self, owner: Pubkey, mint: Pubkey | None = None
    ) -> list[CompressedTokenAccount]:
        params: dict[str, Any] = {"owner": str(owner)}
        if mint is not None:
            params["mint"] = str(mint)

        accounts: list[CompressedTokenAccount] = []
        while True:
            result = self._call(METHOD_GET_COMPRESSED_TOKEN_ACCOUNTS_BY_OWNER, params)
            value = result["value"]
            accounts.extend(CompressedTokenAccount.from_dict(item) for item in value["items"])
            cursor = value.get("cursor")
            if not cursor:
                return accounts
            params["cursor"] = cursor

    def get_validity_proof(self, hashes: list[str]) -> ValidityProof:
        result = self._call(METHOD_GET_VALIDITY_PROOF, {"hashes": hashes, "newAddressesWithTrees": []})
        return ValidityProof.from_dict(result["value"])

    # --- State trees and token pools ---

    def get_state_tree_infos(self) -> list[TreeInfo]:
        """Return known state trees; active trees have no next_tree_info."""
        if self._tree_infos is not None:
            return self._tree_infos

        tables = self._connection.get_multiple_accounts(
            [self._state_tree_lookup_table, self._nullified_lookup_table]
        ).value
        if tables[0] is None:
            raise ValueError(f"State tree lookup table not found: {self._state_tree_lookup_table}")

        addresses = parse_lookup_table_addresses(bytes(tables[0].data))
        nullified = set()
        if tables[1] is not None:
            nullified = set(parse_lookup_table_addresses(bytes(tables[1].data)))

        infos = []
        for i in range(0, len(addresses) - 2, 3):
            tree, queue, cpi_context = addresses[i : i + 3]
            infos.append(TreeInfo(tree=tree, queue=queue, cpi_context=cpi_context, tree_type=TREE_TYPE_STATE_V1))

        active = [info for info in infos if info.tree not in nullified]
        if not active:
            raise ValueError("No active state tree found")
        for info in infos:
            if info.tree in nullified:
                info.next_tree_info = active[0]

        logger.debug("Loaded {} state trees ({} active)", len(infos), len(active))
        self._tree_infos = infos
        return infos

    def get_token_pool_infos(self, mint: Pubkey) -> list[TokenPoolInfo]:
        """Return the initialized token pools of a mint, pool 0 first.

        Raises:
            ValueError: If the mint has no token pool.
        """
        pdas = [derive_token_pool_pda(mint, index) for index in range(MAX_TOKEN_POOLS)]
        accounts = self._connection.get_multiple_accounts([pda for pda, _ in pdas]).value

        infos = []
        for index, ((pda, bump), account) in enumerate(zip(pdas, accounts)):
            if account is None:
                continue
            parsed = TOKEN_ACCOUNT_LAYOUT.parse(bytes(account.data))
            infos.append(
                TokenPoolInfo(
                    mint=mint,
                    token_pool_pda=pda,
                    token_program=account.owner,
                    is_initialized=True,
                    balance=parsed.amount,
                    pool_index=index,
                    bump=bump,
                )
            )

        if not infos:
            raise ValueError(f"Mint {mint} has no token pool; create one before compressing")
        return infos

    # --- Submission ---

    def get_latest_blockhash(self) -> Hash:
        return self._connection.get_latest_blockhash().value.blockhash

    def send_and_confirm_tx(self, tx: VersionedTransaction) -> Signature:
        """Submit, confirm, then wait until the indexer has seen the slot."""
        signature = self._connection.send_transaction(tx).value
        resp = confirm_transaction(self._connection, signature)
        self.confirm_transaction_indexed(resp.context.slot)
        return signature

    def get_indexer_slot(self) -> int:
        return int(self._call(METHOD_GET_INDEXER_SLOT))

    def confirm_transaction_indexed(self, slot: int) -> None:
        """Poll the indexer until it reaches `slot`.

        Raises:
            TimeoutError: If the indexer is still behind after the wait.
        """
        deadline = time.monotonic() + INDEXER_WAIT_TIMEOUT_SECONDS
        while True:
            indexer_slot = self.get_indexer_slot()
            if indexer_slot >= slot:
                return
            if time.monotonic() > deadline:
                raise TimeoutError(
                    f"Indexer at slot {indexer_slot} did not reach slot {slot} "
                    f"within {INDEXER_WAIT_TIMEOUT_SECONDS:g} seconds"
                )
            logger.debug("Indexer at slot {}, waiting for {}", indexer_slot, slot)
            time.sleep(INDEXER_POLL_INTERVAL_SECONDS)

    def close(self) -> None:
        self._http.close()
