"""
Mock Ledger Client
==================
Fake SolanaRpc for testing without network calls.
"""

from typing import Dict, Optional, Set

from solders.hash import Hash
from solders.pubkey import Pubkey


class MockLedger:
    """
    Mock ledger client.

    Returns preset balances and account existence; unknown accounts have
    zero balance and do not exist.

    Usage:
        ledger = MockLedger()
        ledger.set_balance(pubkey, 200_000)
        lamports = await ledger.get_balance(pubkey)
    """

    def __init__(self, anchor: Optional[Hash] = None):
        self.anchor = anchor or Hash.new_unique()
        self._balances: Dict[Pubkey, int] = {}
        self._token_balances: Dict[Pubkey, int] = {}
        self._existing: Set[Pubkey] = set()
        self.anchor_calls = 0
        self.call_count = 0
        self.closed = False

    def set_balance(self, pubkey: Pubkey, lamports: int):
        self._balances[pubkey] = lamports

    def set_token_balance(self, token_account: Pubkey, amount: int):
        self._existing.add(token_account)
        self._token_balances[token_account] = amount

    def add_account(self, pubkey: Pubkey):
        self._existing.add(pubkey)

    async def get_latest_anchor(self) -> Hash:
        self.call_count += 1
        self.anchor_calls += 1
        return self.anchor

    async def get_balance(self, pubkey: Pubkey) -> int:
        self.call_count += 1
        return self._balances.get(pubkey, 0)

    async def account_exists(self, pubkey: Pubkey) -> bool:
        self.call_count += 1
        return pubkey in self._existing

    async def get_token_balance(self, token_account: Pubkey) -> int:
        self.call_count += 1
        return self._token_balances.get(token_account, 0)

    async def close(self):
        self.closed = True
