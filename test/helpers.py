from typing import Any, Iterable, List, Optional

import httpx

from clarityai.errors import UpstreamDataError
from clarityai.gateway import CompletionRequest


class FakeCompletionClient:
    """Stands in for ChatCompletionClient; replays scripted replies or errors."""

    model = "deepseek-chat"

    def __init__(self, replies: Optional[Iterable[Any]] = None) -> None:
        self.replies: List[Any] = list(replies or [])
        self.requests: List[CompletionRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self) -> None:
        pass


class FakeExplorer:
    def __init__(self, sources=None, events=None, transactions=None) -> None:
        self.sources = sources or {}
        self.events = events or {}
        self.transactions = transactions or {}

    async def get_contract_source(self, contract_id: str) -> dict:
        if contract_id not in self.sources:
            raise UpstreamDataError(f"Could not retrieve source code for contract {contract_id}")
        return {"source": self.sources[contract_id], "publish_height": 1, "contract_id": contract_id}

    async def get_contract_events(self, contract_id: str, limit: int = 10) -> list:
        return self.events.get(contract_id, [])

    async def get_transaction(self, tx_id: str) -> dict:
        if tx_id not in self.transactions:
            raise UpstreamDataError(f"Transaction {tx_id} not found")
        return self.transactions[tx_id]

    async def close(self) -> None:
        pass


class ScriptedProvider:
    """MockTransport handler returning queued responses and counting attempts."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome
