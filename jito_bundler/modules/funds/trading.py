"""
Token Trading Service
=====================
Placeholder trading bundles.

Every participating wallet contributes exactly TRADES_PER_WALLET trade
messages, wallet-major order. Messages go out as memo transactions
signed by the main wallet; no swap is executed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, Union

from solders.pubkey import Pubkey

from jito_bundler.config.settings import Settings
from jito_bundler.modules.funds.config import FundsConfig
from jito_bundler.shared.execution.bundle_engine import BundleSubmissionEngine
from jito_bundler.shared.execution.errors import NoWalletsFound
from jito_bundler.shared.execution.schemas import RawMessages, SigningIdentity
from jito_bundler.shared.system.logging import Logger


class TradeAction(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class TradingPair:
    """One trade template: action on `mint` for `amount` tokens."""
    mint: Pubkey
    amount: float
    action: TradeAction


class TokenTradingService:
    def __init__(self, engine: BundleSubmissionEngine, config: Optional[FundsConfig] = None):
        self.engine = engine
        self.config = config or FundsConfig()

    # =========================================================================
    # MESSAGE PLANNING
    # =========================================================================

    @staticmethod
    def plan_messages(
        wallets: Sequence[SigningIdentity],
        render: Callable[[SigningIdentity, int], str],
    ) -> List[str]:
        """
        render(wallet, i) for i in 0..TRADES_PER_WALLET-1, for each wallet in order.

        Every memo is signed by the main wallet against one anchor, so
        rendered messages must be unique or the transactions collide.
        """
        return [render(wallet, i) for wallet in wallets for i in range(Settings.TRADES_PER_WALLET)]

    @staticmethod
    def _trade_tag(i: int) -> str:
        return f"(trade {i + 1}/{Settings.TRADES_PER_WALLET})"

    @staticmethod
    def _pair_message(pair: TradingPair, wallet: SigningIdentity, i: int) -> str:
        return (f"{pair.action.value.upper()} {pair.amount} {pair.mint} with {wallet.address} "
                f"{TokenTradingService._trade_tag(i)}")

    # =========================================================================
    # BUNDLES
    # =========================================================================

    async def create_trading_bundle(self, wallets: Sequence[SigningIdentity], trading_pairs: Sequence[TradingPair]) -> str:
        """Cycle through trading_pairs for each wallet's trades."""
        self._require_wallets(wallets)
        if not trading_pairs:
            raise ValueError("At least one trading pair is required")

        messages = self.plan_messages(
            wallets, lambda w, i: self._pair_message(trading_pairs[i % len(trading_pairs)], w, i))
        Logger.info(f"[FUNDS] Trading bundle: {len(wallets)} wallets, {len(messages)} transactions")
        return await self._submit(messages)

    async def buy_tokens_with_bundles(
        self,
        wallets: Sequence[SigningIdentity],
        token_mint: Pubkey,
        amount_per_wallet: float,
        sol_amount: float,
    ) -> str:
        self._require_wallets(wallets)
        self._require_positive(amount_per_wallet, "Amount per wallet")
        self._require_positive(sol_amount, "SOL amount")

        messages = self.plan_messages(
            wallets,
            lambda w, i: (f"Buy {amount_per_wallet} tokens of {token_mint} for {sol_amount} SOL "
                          f"with wallet {w.address} {self._trade_tag(i)}"),
        )
        Logger.info(f"[FUNDS] Buying tokens with {len(wallets)} wallets, "
                    f"{Settings.TRADES_PER_WALLET} transactions each")
        return await self._submit(messages)

    async def sell_tokens_with_bundles(
        self,
        wallets: Sequence[SigningIdentity],
        token_mint: Pubkey,
        amount_per_wallet: float,
    ) -> str:
        self._require_wallets(wallets)
        self._require_positive(amount_per_wallet, "Amount per wallet")

        messages = self.plan_messages(
            wallets,
            lambda w, i: f"Sell {amount_per_wallet} tokens of {token_mint} with wallet {w.address} {self._trade_tag(i)}",
        )
        Logger.info(f"[FUNDS] Selling tokens with {len(wallets)} wallets, "
                    f"{Settings.TRADES_PER_WALLET} transactions each")
        return await self._submit(messages)

    async def mixed_trading_bundles(self, wallets: Sequence[SigningIdentity], operations: Sequence[TradingPair]) -> str:
        """Trade i of each wallet uses operations[i % len(operations)]."""
        self._require_wallets(wallets)
        if not operations:
            raise ValueError("At least one trading operation is required")

        messages = self.plan_messages(
            wallets, lambda w, i: self._pair_message(operations[i % len(operations)], w, i))
        Logger.info(f"[FUNDS] Mixed trading bundle with {len(messages)} transactions")
        return await self._submit(messages)

    async def _submit(self, messages: List[str]) -> str:
        return await self.engine.submit(RawMessages(tuple(messages)), self.config.bundle_config())

    # =========================================================================
    # HELPERS
    # =========================================================================

    def calculate_trading_fees(self, transaction_count: int, base_fee: Optional[float] = None) -> float:
        fee = self.config.BASE_FEE_SOL if base_fee is None else base_fee
        return transaction_count * fee

    @staticmethod
    def validate_trading_params(
        wallets: Sequence[SigningIdentity],
        token_mint: Union[Pubkey, str, None],
        amount: float,
    ) -> Tuple[bool, List[str]]:
        errors = []
        if not wallets:
            errors.append("No wallets provided")
        if amount <= 0:
            errors.append("Amount must be greater than 0")
        if not token_mint or not str(token_mint).strip():
            errors.append("Token mint address is required")
        return len(errors) == 0, errors

    @staticmethod
    def _require_wallets(wallets: Sequence[SigningIdentity]) -> None:
        if not wallets:
            raise NoWalletsFound("No wallets provided")

    @staticmethod
    def _require_positive(value: float, label: str) -> None:
        if value <= 0:
            raise ValueError(f"{label} must be greater than 0, got {value}")
