"""
Fund Orchestration Configuration
================================
Economic parameters and bundle defaults for the fund services.
"""

from dataclasses import dataclass

from jito_bundler.config.settings import Settings
from jito_bundler.shared.execution.schemas import BundleConfig, InvalidStatusPolicy


@dataclass
class FundsConfig:
    """Configuration shared by distribution, transfer and trading services."""

    # Collection
    COLLECT_RESERVE_LAMPORTS: int = Settings.COLLECT_RESERVE_LAMPORTS

    # Distribution planning
    DISTRIBUTION_RESERVE_SOL: float = 0.1  # kept on the main wallet for fees

    # Fee estimate per transaction (signature fee)
    BASE_FEE_SOL: float = 0.000005

    # Bundle defaults
    TIP_LAMPORTS: int = Settings.JITO_MINIMUM_TIP_LAMPORTS
    SIMULATE_FIRST: bool = True
    POLL_TIMEOUT_MS: int = Settings.POLL_TIMEOUT_MS
    POLL_INTERVAL_MS: int = Settings.POLL_INTERVAL_MS
    WAIT_BEFORE_POLL_MS: int = Settings.WAIT_BEFORE_POLL_MS
    INVALID_POLICY: InvalidStatusPolicy = InvalidStatusPolicy.RETRY

    def bundle_config(self) -> BundleConfig:
        return BundleConfig(
            tip_lamports=self.TIP_LAMPORTS,
            simulate_first=self.SIMULATE_FIRST,
            timeout_ms=self.POLL_TIMEOUT_MS,
            poll_interval_ms=self.POLL_INTERVAL_MS,
            wait_before_poll_ms=self.WAIT_BEFORE_POLL_MS,
            invalid_policy=self.INVALID_POLICY,
        )

    @staticmethod
    def sol_to_lamports(amount_sol: float) -> int:
        return int(round(amount_sol * Settings.LAMPORTS_PER_SOL))

    @staticmethod
    def lamports_to_sol(lamports: int) -> float:
        return lamports / Settings.LAMPORTS_PER_SOL
