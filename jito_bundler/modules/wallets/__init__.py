"""
Wallets Module
==============
In-memory wallet folders that supply signing identities to the fund
services.
"""

from jito_bundler.modules.wallets.folders import FolderRegistry, WalletGroup, WalletRecord

__all__ = [
    'FolderRegistry',
    'WalletGroup',
    'WalletRecord',
]
