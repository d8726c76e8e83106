"""
Wallet Folders
==============
In-memory registry of named wallet groups.

This is the key source for fund orchestration: folders hand out
ordered SigningIdentities and addresses. Nothing is persisted.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from solders.pubkey import Pubkey

from jito_bundler.shared.execution.errors import FolderNotFound
from jito_bundler.shared.execution.schemas import SigningIdentity
from jito_bundler.shared.system.logging import Logger


def _new_id() -> str:
    return uuid.uuid4().hex[:9]


@dataclass
class WalletRecord:
    id: str
    name: str
    identity: SigningIdentity

    @property
    def address(self) -> str:
        return self.identity.address

    @property
    def pubkey(self) -> Pubkey:
        return self.identity.pubkey


@dataclass
class WalletGroup:
    """A named, ordered folder of wallets."""
    id: str
    name: str
    wallets: List[WalletRecord] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def identities(self) -> List[SigningIdentity]:
        return [w.identity for w in self.wallets]

    @property
    def pubkeys(self) -> List[Pubkey]:
        return [w.pubkey for w in self.wallets]


class FolderRegistry:
    def __init__(self):
        self._folders: Dict[str, WalletGroup] = {}

    def create_folder(self, name: str) -> WalletGroup:
        folder = WalletGroup(id=_new_id(), name=name)
        self._folders[folder.id] = folder
        Logger.info(f"[WALLETS] Created folder '{name}' ({folder.id})")
        return folder

    def create_wallets_in_folder(self, folder_id: str, count: int) -> List[WalletRecord]:
        folder = self.require_folder(folder_id)

        start = len(folder.wallets)
        created = [
            WalletRecord(id=_new_id(), name=f"Wallet {start + i + 1}", identity=SigningIdentity.generate())
            for i in range(count)
        ]
        folder.wallets.extend(created)
        Logger.info(f"[WALLETS] Added {count} wallets to '{folder.name}'")
        return created

    def add_wallet(self, folder_id: str, identity: SigningIdentity, name: Optional[str] = None) -> WalletRecord:
        """Import an existing keypair into a folder."""
        folder = self.require_folder(folder_id)
        record = WalletRecord(id=_new_id(), name=name or f"Wallet {len(folder.wallets) + 1}", identity=identity)
        folder.wallets.append(record)
        return record

    def get_folders(self) -> List[WalletGroup]:
        return list(self._folders.values())

    def get_folder(self, folder_id: str) -> Optional[WalletGroup]:
        return self._folders.get(folder_id)

    def require_folder(self, folder_id: str) -> WalletGroup:
        folder = self._folders.get(folder_id)
        if folder is None:
            raise FolderNotFound(folder_id)
        return folder

    def delete_folder(self, folder_id: str) -> None:
        self._folders.pop(folder_id, None)

    def get_all_wallets(self) -> List[WalletRecord]:
        return [w for folder in self._folders.values() for w in folder.wallets]

    def get_wallets_from_folders(self, folder_ids: Iterable[str]) -> List[WalletRecord]:
        """Wallets of the given folders, in folder order. Unknown ids are skipped."""
        wallets: List[WalletRecord] = []
        for folder_id in folder_ids:
            folder = self._folders.get(folder_id)
            if folder:
                wallets.extend(folder.wallets)
        return wallets
