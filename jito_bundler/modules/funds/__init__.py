"""
Funds Module
============
Atomic multi-wallet fund operations over Jito bundles.

Components:
- config.py: Economic parameters and bundle defaults
- distribution.py: SOL distribute / collect
- token_transfer.py: SPL token moves to main and between folders
- trading.py: Placeholder trading bundles
- orchestrator.py: Folder-level facade with lifecycle
"""

from jito_bundler.modules.funds.config import FundsConfig
from jito_bundler.modules.funds.orchestrator import FundOrchestrator
from jito_bundler.modules.funds.trading import TradeAction, TradingPair

__all__ = [
    'FundsConfig',
    'FundOrchestrator',
    'TradeAction',
    'TradingPair',
]
