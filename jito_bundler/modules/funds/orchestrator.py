"""
Fund Orchestrator
=================
Folder-level facade over the bundle engine and the fund services.

Resolves folder ids to wallets, validates parameters and hands off to
SolDistributionService, TokenTransferService or TokenTradingService.
Every precondition is checked before any network call.

Usage:
    orchestrator = FundOrchestrator(registry)
    async with orchestrator.session(main_wallet=identity):
        await orchestrator.distribute_sol_to_folders([folder.id], 0.01)
"""

from contextlib import asynccontextmanager
from typing import List, Optional, Sequence, Union

from solders.pubkey import Pubkey

from jito_bundler.config.settings import Settings
from jito_bundler.modules.funds.config import FundsConfig
from jito_bundler.modules.funds.distribution import SolDistributionService
from jito_bundler.modules.funds.token_transfer import TokenTransferService
from jito_bundler.modules.funds.trading import TokenTradingService, TradingPair
from jito_bundler.modules.wallets.folders import FolderRegistry
from jito_bundler.shared.execution.bundle_engine import BundleSubmissionEngine
from jito_bundler.shared.execution.errors import NoWalletsFound, ServicesNotInitialized
from jito_bundler.shared.execution.schemas import SigningIdentity
from jito_bundler.shared.infrastructure.jito_adapter import JitoAdapter
from jito_bundler.shared.infrastructure.rpc_client import SolanaRpc
from jito_bundler.shared.system.logging import Logger


class FundOrchestrator:
    def __init__(self, folders: Optional[FolderRegistry] = None, config: Optional[FundsConfig] = None):
        self.folders = folders or FolderRegistry()
        self.config = config or FundsConfig()

        self.engine: Optional[BundleSubmissionEngine] = None
        self.distribution: Optional[SolDistributionService] = None
        self.token_transfer: Optional[TokenTransferService] = None
        self.trading: Optional[TokenTradingService] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def initialize(
        self,
        rpc_url: Optional[str] = None,
        main_wallet: Union[SigningIdentity, str, None] = None,
        jito_url: Optional[str] = None,
        relay: Optional[JitoAdapter] = None,
        rpc: Optional[SolanaRpc] = None,
    ) -> None:
        """
        Wire the relay, ledger client and services.

        Args:
            rpc_url: Ledger endpoint (default: SOLANA_RPC_URL)
            main_wallet: Identity or base58 secret key (default: MAIN_WALLET_PRIVATE_KEY)
            jito_url: Relay JSON-RPC URL (default: JITO_BLOCK_ENGINE_URL, else JITO_REGION)
            relay / rpc: Pre-built clients, used instead of the URLs
        """
        if self.engine is not None:
            await self.close()

        identity = self._resolve_main_wallet(main_wallet)
        rpc = rpc or SolanaRpc(rpc_url or Settings.SOLANA_RPC_URL)
        relay = relay or JitoAdapter(endpoint=jito_url or Settings.JITO_BLOCK_ENGINE_URL or None)

        engine = BundleSubmissionEngine(relay, rpc, identity, default_config=self.config.bundle_config())
        await engine.initialize()

        self.engine = engine
        self.distribution = SolDistributionService(engine, self.config)
        self.token_transfer = TokenTransferService(engine, self.config)
        self.trading = TokenTradingService(engine, self.config)
        Logger.success(f"[FUNDS] Bundle services initialized (main wallet {identity.address})")

    async def close(self) -> None:
        if self.engine is None:
            return
        await self.engine.close()
        await self.engine.rpc.close()
        self.engine = None
        self.distribution = None
        self.token_transfer = None
        self.trading = None

    @asynccontextmanager
    async def session(self, **kwargs):
        await self.initialize(**kwargs)
        try:
            yield self
        finally:
            await self.close()

    async def __aenter__(self) -> "FundOrchestrator":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    @property
    def main_wallet_address(self) -> Optional[str]:
        return self.engine.main_wallet.address if self.engine else None

    @staticmethod
    def _resolve_main_wallet(main_wallet: Union[SigningIdentity, str, None]) -> SigningIdentity:
        if isinstance(main_wallet, SigningIdentity):
            return main_wallet
        secret = main_wallet or Settings.MAIN_WALLET_PRIVATE_KEY
        if not secret:
            raise ValueError("Main wallet not provided and MAIN_WALLET_PRIVATE_KEY is not set")
        return SigningIdentity.from_base58_string(secret)

    def _require_services(self) -> BundleSubmissionEngine:
        if self.engine is None:
            raise ServicesNotInitialized()
        return self.engine

    # =========================================================================
    # PARAMETER RESOLUTION
    # =========================================================================

    def _identities(self, folder_ids: Sequence[str]) -> List[SigningIdentity]:
        if not folder_ids:
            raise NoWalletsFound("No folders specified")
        wallets = self.folders.get_wallets_from_folders(folder_ids)
        if not wallets:
            raise NoWalletsFound()
        return [w.identity for w in wallets]

    @staticmethod
    def _parse_mint(token_mint: Union[Pubkey, str, None]) -> Pubkey:
        if isinstance(token_mint, Pubkey):
            return token_mint
        if not token_mint or not token_mint.strip():
            raise ValueError("Token mint address is required")
        try:
            return Pubkey.from_string(token_mint.strip())
        except ValueError as e:
            raise ValueError(f"Invalid token mint address: {token_mint}") from e

    @staticmethod
    def _require_positive(value: float, label: str) -> None:
        if value is None or value <= 0:
            raise ValueError(f"{label} must be greater than 0, got {value}")

    # =========================================================================
    # SOL
    # =========================================================================

    async def distribute_sol_to_folders(self, folder_ids: Sequence[str], amount_per_wallet_sol: float) -> str:
        self._require_services()
        Logger.section("Distribute SOL")
        self._require_positive(amount_per_wallet_sol, "Amount per wallet")
        wallets = self._identities(folder_ids)
        return await self.distribution.distribute_sol_to_wallets([w.pubkey for w in wallets], amount_per_wallet_sol)

    async def collect_sol_from_folders(self, folder_ids: Sequence[str]) -> str:
        self._require_services()
        Logger.section("Collect SOL")
        wallets = self._identities(folder_ids)
        return await self.distribution.collect_sol_from_wallets(wallets)

    async def get_wallet_sol_balance(self, address: Union[Pubkey, str]) -> float:
        self._require_services()
        pubkey = address if isinstance(address, Pubkey) else Pubkey.from_string(address)
        return await self.distribution.get_sol_balance(pubkey)

    async def get_folders_total_sol_balance(self, folder_ids: Sequence[str]) -> float:
        self._require_services()
        wallets = self.folders.get_wallets_from_folders(folder_ids)
        return await self.distribution.get_total_sol_balance([w.pubkey for w in wallets])

    # =========================================================================
    # TRADING
    # =========================================================================

    async def buy_tokens_with_bundles(
        self,
        folder_ids: Sequence[str],
        token_mint: Union[Pubkey, str],
        amount_per_wallet: float,
        sol_amount: float,
    ) -> str:
        self._require_services()
        Logger.section("Buy Tokens")
        mint = self._parse_mint(token_mint)
        self._require_positive(amount_per_wallet, "Amount per wallet")
        self._require_positive(sol_amount, "SOL amount")
        wallets = self._identities(folder_ids)
        return await self.trading.buy_tokens_with_bundles(wallets, mint, amount_per_wallet, sol_amount)

    async def sell_tokens_with_bundles(
        self,
        folder_ids: Sequence[str],
        token_mint: Union[Pubkey, str],
        amount_per_wallet: float,
    ) -> str:
        self._require_services()
        Logger.section("Sell Tokens")
        mint = self._parse_mint(token_mint)
        self._require_positive(amount_per_wallet, "Amount per wallet")
        wallets = self._identities(folder_ids)
        return await self.trading.sell_tokens_with_bundles(wallets, mint, amount_per_wallet)

    async def mixed_trading_bundles(self, folder_ids: Sequence[str], operations: Sequence[TradingPair]) -> str:
        self._require_services()
        Logger.section("Mixed Trading")
        if not operations:
            raise ValueError("At least one trading operation is required")
        wallets = self._identities(folder_ids)
        return await self.trading.mixed_trading_bundles(wallets, operations)

    # =========================================================================
    # TOKEN TRANSFERS
    # =========================================================================

    async def send_tokens_from_folders(
        self,
        folder_ids: Sequence[str],
        amount: int,
        token_mint: Union[Pubkey, str],
    ) -> str:
        self._require_services()
        Logger.section("Send Tokens To Main")
        mint = self._parse_mint(token_mint)
        self._require_positive(amount, "Amount")
        wallets = self._identities(folder_ids)
        return await self.token_transfer.send_tokens_to_main(wallets, mint, amount)

    async def send_tokens_between_folders(
        self,
        from_folder_id: str,
        to_folder_id: str,
        amount: int,
        token_mint: Union[Pubkey, str],
    ) -> str:
        self._require_services()
        Logger.section("Send Tokens Between Folders")
        mint = self._parse_mint(token_mint)
        self._require_positive(amount, "Amount")

        source = self.folders.require_folder(from_folder_id)
        destination = self.folders.require_folder(to_folder_id)
        if not source.wallets or not destination.wallets:
            raise NoWalletsFound("No wallets found in source or destination folder")

        return await self.token_transfer.send_tokens_between(source.identities, destination.pubkeys, mint, amount)

    async def get_token_balance(self, address: Union[Pubkey, str], token_mint: Union[Pubkey, str]) -> int:
        self._require_services()
        pubkey = address if isinstance(address, Pubkey) else Pubkey.from_string(address)
        return await self.token_transfer.get_token_balance(pubkey, self._parse_mint(token_mint))
