import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .errors import UpstreamDataError


logger = logging.getLogger(__name__)

TRANSACTION_ID_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")
CONTRACT_ID_PATTERN = re.compile(r"^S[0-9A-Z]{27,40}\.[a-zA-Z][a-zA-Z0-9_-]*$")

DEFAULT_EVENT_LIMIT = 10
EXPLORER_TIMEOUT_SECONDS = 15.0


def is_transaction_id(value: str) -> bool:
    return bool(TRANSACTION_ID_PATTERN.match(value.strip()))


def is_contract_id(value: str) -> bool:
    return bool(CONTRACT_ID_PATTERN.match(value.strip()))


class HiroExplorerClient:
    """Read-only client for the Hiro Stacks API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=settings.hiro_api_url,
            transport=transport,
            timeout=EXPLORER_TIMEOUT_SECONDS,
        )

    async def close(self) -> None:
        await self._http.aclose()

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamDataError(
                f"Explorer returned HTTP {exc.response.status_code} for {path}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamDataError(f"Explorer request failed for {path}: {exc!r}") from exc

    async def get_contract_source(self, contract_id: str) -> Dict[str, Any]:
        address, _, name = contract_id.partition(".")
        if not address or not name:
            raise UpstreamDataError(f"Invalid contract id: {contract_id}")

        data = await self._get_json(f"/v2/contracts/source/{address}/{name}")
        if not isinstance(data, dict) or not data.get("source"):
            raise UpstreamDataError(f"Could not retrieve source code for contract {contract_id}")
        return {
            "source": data["source"],
            "publish_height": data.get("publish_height"),
            "contract_id": data.get("contract_id", contract_id),
        }

    async def get_contract_events(self, contract_id: str, limit: int = DEFAULT_EVENT_LIMIT) -> List[Any]:
        """Recent events for ``contract_id``; an empty list when the explorer has none."""
        try:
            data = await self._get_json(f"/extended/v1/contract/{contract_id}/events", params={"limit": limit})
        except UpstreamDataError as exc:
            logger.warning(f"Could not fetch contract events: {exc}")
            return []

        results = data.get("results") if isinstance(data, dict) else None
        return results if isinstance(results, list) else []

    async def get_transaction(self, tx_id: str) -> Dict[str, Any]:
        data = await self._get_json(f"/extended/v1/tx/{tx_id}")
        if not isinstance(data, dict) or not data.get("tx_id"):
            raise UpstreamDataError(f"Transaction {tx_id} not found")
        return data
