"""
Solana Ledger Client
====================
Read-only ledger lookups the bundle pipeline needs:
liveness anchors (recent blockhash), SOL balances, account existence
and token balances. Wraps solana-py's AsyncClient and converts its
failures into the bundler error taxonomy.
"""

from typing import Optional

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.pubkey import Pubkey

from jito_bundler.config.settings import Settings
from jito_bundler.shared.execution.errors import AccountLookupError, RelayError
from jito_bundler.shared.system.logging import Logger

_RPC_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError)


class SolanaRpc:
    """
    Usage:
        rpc = SolanaRpc("https://api.mainnet-beta.solana.com")
        anchor = await rpc.get_latest_anchor()
        lamports = await rpc.get_balance(pubkey)
        await rpc.close()
    """

    def __init__(self, endpoint: str = Settings.SOLANA_RPC_URL, client: Optional[AsyncClient] = None):
        self.endpoint = endpoint
        self.commitment = Commitment(Settings.ANCHOR_COMMITMENT)
        self.client = client or AsyncClient(endpoint, commitment=self.commitment)

    async def close(self) -> None:
        await self.client.close()

    async def get_latest_anchor(self) -> Hash:
        """Fresh blockhash at 'confirmed' commitment."""
        try:
            resp = await self.client.get_latest_blockhash(commitment=self.commitment)
        except _RPC_ERRORS as e:
            raise RelayError("getLatestBlockhash", str(e)) from e
        anchor = resp.value.blockhash
        Logger.debug(f"[RPC] Latest blockhash: {anchor}")
        return anchor

    async def get_balance(self, pubkey: Pubkey) -> int:
        """Balance in lamports."""
        try:
            resp = await self.client.get_balance(pubkey, commitment=self.commitment)
        except _RPC_ERRORS as e:
            raise AccountLookupError(str(pubkey), str(e)) from e
        return int(resp.value)

    async def account_exists(self, pubkey: Pubkey) -> bool:
        try:
            resp = await self.client.get_account_info(pubkey, commitment=self.commitment)
        except _RPC_ERRORS as e:
            raise AccountLookupError(str(pubkey), str(e)) from e
        return resp.value is not None

    async def get_token_balance(self, token_account: Pubkey) -> int:
        """Token base units held by a token account; 0 when it does not exist."""
        if not await self.account_exists(token_account):
            return 0
        try:
            resp = await self.client.get_token_account_balance(token_account, commitment=self.commitment)
        except _RPC_ERRORS as e:
            raise AccountLookupError(str(token_account), str(e)) from e
        return int(resp.value.amount)
