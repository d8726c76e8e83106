"""
Token Transfer Service
======================
SPL token moves between folder wallets and the main wallet.

- to main:         one transfer per source wallet
- between folders: one transfer per (source, destination) pair

Each transfer is signed only by its source wallet and creates the
destination's associated token account when it is missing.
"""

from typing import List, Optional, Sequence

from solders.hash import Hash
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from jito_bundler.modules.funds.config import FundsConfig
from jito_bundler.shared.execution.bundle_engine import BundleSubmissionEngine
from jito_bundler.shared.execution.errors import NoWalletsFound
from jito_bundler.shared.execution.schemas import (
    PrebuiltPayload,
    SignedTransaction,
    SigningIdentity,
    TransferIntent,
)
from jito_bundler.shared.system.logging import Logger


class TokenTransferService:
    def __init__(self, engine: BundleSubmissionEngine, config: Optional[FundsConfig] = None):
        self.engine = engine
        self.config = config or FundsConfig()

    async def create_token_transfer_transactions(
        self,
        transfers: Sequence[TransferIntent],
        anchor: Hash,
    ) -> List[SignedTransaction]:
        return await self.engine.assembler.build_batch(transfers, anchor)

    async def send_tokens_to_main(self, source_wallets: Sequence[SigningIdentity], token_mint: Pubkey, amount: int) -> str:
        if not source_wallets:
            raise NoWalletsFound("No source wallets provided")
        transfers = [
            TransferIntent(source=wallet, destination=self.engine.main_wallet.pubkey, amount=amount, mint=token_mint)
            for wallet in source_wallets
        ]
        Logger.info(f"[FUNDS] Sending {amount} of {str(token_mint)[:8]}... from {len(transfers)} wallets to main")
        return await self._bundle(transfers)

    async def send_tokens_between(
        self,
        from_wallets: Sequence[SigningIdentity],
        to_wallets: Sequence[Pubkey],
        token_mint: Pubkey,
        amount: int,
    ) -> str:
        """Cross product: |from| x |to| transfers, source-major order."""
        if not from_wallets:
            raise NoWalletsFound("Source folder has no wallets")
        if not to_wallets:
            raise NoWalletsFound("Destination folder has no wallets")

        transfers = self.plan_cross_transfers(from_wallets, to_wallets, token_mint, amount)
        Logger.info(f"[FUNDS] Sending {amount} of {str(token_mint)[:8]}... across "
                    f"{len(from_wallets)}x{len(to_wallets)} wallet pairs")
        return await self._bundle(transfers)

    @staticmethod
    def plan_cross_transfers(
        from_wallets: Sequence[SigningIdentity],
        to_wallets: Sequence[Pubkey],
        token_mint: Pubkey,
        amount: int,
    ) -> List[TransferIntent]:
        return [
            TransferIntent(source=source, destination=dest, amount=amount, mint=token_mint)
            for source in from_wallets
            for dest in to_wallets
        ]

    async def _bundle(self, transfers: Sequence[TransferIntent]) -> str:
        anchor = await self.engine.rpc.get_latest_anchor()
        transactions = await self.create_token_transfer_transactions(transfers, anchor)
        return await self.engine.submit(PrebuiltPayload(tuple(transactions)), self.config.bundle_config())

    async def get_token_balance(self, wallet: Pubkey, token_mint: Pubkey) -> int:
        """Base units held in the wallet's associated token account."""
        ata = get_associated_token_address(wallet, token_mint)
        return await self.engine.rpc.get_token_balance(ata)
