import random
from typing import Optional

from solders.pubkey import Pubkey

from jito_bundler.shared.execution.errors import NoTipAccountsAvailable
from jito_bundler.shared.infrastructure.jito_adapter import JitoAdapter
from jito_bundler.shared.system.logging import Logger


class TipAccountSelector:
    """
    Picks the incentive destination from the relay's tip account pool.

    Every call queries the relay and draws uniformly at random, spreading
    tips across the pool. Nothing is cached.
    """

    def __init__(self, relay: JitoAdapter, rng: Optional[random.Random] = None):
        self.relay = relay
        self._rng = rng or random.Random()

    async def select_tip_account(self) -> Pubkey:
        accounts = await self.relay.get_tip_accounts()
        if not accounts:
            raise NoTipAccountsAvailable()
        chosen = self._rng.choice(accounts)
        Logger.debug(f"[TIP] Selected tip account {chosen} from pool of {len(accounts)}")
        return Pubkey.from_string(chosen)
