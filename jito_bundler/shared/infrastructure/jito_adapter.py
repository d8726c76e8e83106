"""
Jito Block Engine Adapter (Async)
=================================
JSON-RPC client for the Jito bundle relay.

Features:
- Async HTTP (httpx) to keep the event loop free
- Regional endpoint selection (no failover, one relay per adapter)
- Typed failures: every transport or JSON-RPC error raises RelayError

Methods map 1:1 to the relay API:
    getTipAccounts, simulateBundle, sendBundle,
    getInflightBundleStatuses, getBundleStatuses, getRegions
"""

from typing import Any, Dict, List, Optional

import httpx

from jito_bundler.config.settings import Settings
from jito_bundler.shared.execution.errors import RelayError
from jito_bundler.shared.system.logging import Logger


class JitoAdapter:
    BUNDLES_PATH = "/api/v1/bundles"

    REGIONAL_ENDPOINTS = {
        "mainnet": "https://mainnet.block-engine.jito.wtf",
        "amsterdam": "https://amsterdam.mainnet.block-engine.jito.wtf",
        "frankfurt": "https://frankfurt.mainnet.block-engine.jito.wtf",
        "ny": "https://ny.mainnet.block-engine.jito.wtf",
        "tokyo": "https://tokyo.mainnet.block-engine.jito.wtf",
    }

    def __init__(
        self,
        endpoint: Optional[str] = None,
        region: str = Settings.JITO_REGION,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = Settings.JITO_REQUEST_TIMEOUT,
    ):
        """
        Args:
            endpoint: Full JSON-RPC URL. Overrides region (e.g. an RPC
                provider that forwards bundle methods).
            region: Key of REGIONAL_ENDPOINTS, used when endpoint is empty.
            client: Shared httpx client. When omitted, each call opens its own.
            timeout: Per-request timeout in seconds.
        """
        if endpoint:
            self.api_url = endpoint
        else:
            base = self.REGIONAL_ENDPOINTS.get(region, self.REGIONAL_ENDPOINTS["mainnet"])
            self.api_url = base + self.BUNDLES_PATH
        self.timeout = timeout
        self._client = client
        self._request_id = 0

    async def _post(self, client: httpx.AsyncClient, method: str, payload: Dict) -> httpx.Response:
        try:
            return await client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            raise RelayError(method, f"transport error: {e}") from e

    async def _rpc_call(self, method: str, params: Optional[list] = None) -> Any:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params or []}

        if self._client is not None:
            response = await self._post(self._client, method, payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await self._post(client, method, payload)

        if response.status_code == 429:
            Logger.warning(f"[JITO] Rate Limit (429) on {method}")
            raise RelayError(method, "rate limited (HTTP 429)")
        if response.status_code != 200:
            raise RelayError(method, f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            body = response.json()
        except ValueError as e:
            raise RelayError(method, "invalid JSON response") from e

        if body.get("error"):
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RelayError(method, str(message))

        Logger.debug(f"[JITO] {method} OK")
        return body.get("result")

    # =========================================================================
    # RELAY API
    # =========================================================================

    async def get_tip_accounts(self) -> List[str]:
        result = await self._rpc_call("getTipAccounts")
        return list(result or [])

    async def simulate_bundle(self, wire_transactions: List[str]) -> Dict:
        """Returns the simulation `value` ({summary, transactionResults})."""
        result = await self._rpc_call(
            "simulateBundle", [{"encodedTransactions": wire_transactions}]
        )
        if not isinstance(result, dict):
            raise RelayError("simulateBundle", f"unexpected result: {result!r}")
        return result.get("value") or {}

    async def send_bundle(self, wire_transactions: List[str]) -> str:
        result = await self._rpc_call("sendBundle", [wire_transactions, {"encoding": "base64"}])
        if not result:
            raise RelayError("sendBundle", "relay returned no bundle id")
        return str(result)

    async def get_inflight_bundle_statuses(self, bundle_ids: List[str]) -> List[Dict]:
        """[{bundle_id, status, landed_slot}, ...]; empty while the relay has no record."""
        result = await self._rpc_call("getInflightBundleStatuses", [bundle_ids])
        if not result:
            return []
        return list(result.get("value") or [])

    async def get_bundle_statuses(self, bundle_ids: List[str]) -> List[Dict]:
        result = await self._rpc_call("getBundleStatuses", [bundle_ids])
        if not result:
            return []
        return list(result.get("value") or [])

    async def get_regions(self) -> List[str]:
        result = await self._rpc_call("getRegions")
        return list(result or [])
