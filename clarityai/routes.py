import json
import logging
from typing import Any, Awaitable, Optional, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from . import analysis
from .defaults import RoutePolicy, policy_for
from .errors import ConfigurationError, GatewayError, InputValidationError, ParseError, UpstreamDataError
from .explorer import HiroExplorerClient, is_contract_id, is_transaction_id
from .gateway import ChatCompletionClient
from .schemas import (
    ChatRequest,
    ChatResponse,
    CodeRequest,
    ContractAnalysisRequest,
    DecodeRequest,
    GenerateContractRequest,
    GeneratedContract,
    TransactionRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai")

UNSUPPORTED_METHODS = ["GET", "PUT", "PATCH", "DELETE"]


def get_completion_client(request: Request) -> ChatCompletionClient:
    return request.app.state.completion_client


def get_explorer(request: Request) -> HiroExplorerClient:
    return request.app.state.explorer


def _require_text(value: Any, message: str, route: Optional[str] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InputValidationError(message, route=route)
    return value


async def _outcome(policy: RoutePolicy, work: Awaitable[Any]) -> Tuple[int, Any]:
    """Await ``work`` and map service errors onto the route's failure policy."""
    try:
        return 200, await work
    except ConfigurationError as exc:
        logger.error(f"[{policy.name}] {exc}")
        return 500, policy.error_body("Internal Server Error")
    except GatewayError as exc:
        logger.error(f"[{policy.name}] provider call failed: {exc}")
        return policy.gateway_failure_status, policy.error_body()
    except ParseError as exc:
        logger.error(f"[{policy.name}] {exc}")
        return 500, policy.error_body(str(exc))
    except Exception:
        logger.exception(f"[{policy.name}] unexpected failure")
        return 500, policy.error_body()


async def _respond(policy: RoutePolicy, work: Awaitable[Any]) -> JSONResponse:
    status_code, body = await _outcome(policy, work)
    return JSONResponse(body, status_code=status_code)


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, client: ChatCompletionClient = Depends(get_completion_client)):
    message = _require_text(body.message, "Message is required", "chat")
    return await _respond(policy_for("chat"), analysis.chat(client, message))


@router.post("/generate", response_model=GeneratedContract)
async def generate(body: GenerateContractRequest, client: ChatCompletionClient = Depends(get_completion_client)):
    description = _require_text(body.description, "Contract description is required", "generate")
    return await _respond(
        policy_for("generate"),
        analysis.generate_contract(client, description, body.features),
    )


@router.post("/generate-tests")
async def generate_tests(body: CodeRequest, client: ChatCompletionClient = Depends(get_completion_client)):
    code = _require_text(body.code, "Contract code is required", "generate-tests")
    return await _respond(policy_for("generate-tests"), analysis.generate_tests(client, code))


@router.post("/summarize")
async def summarize(body: CodeRequest, client: ChatCompletionClient = Depends(get_completion_client)):
    code = _require_text(body.code, "Contract code is required", "summarize")
    return await _respond(policy_for("summarize"), analysis.summarize(client, code))


@router.post("/analyze")
async def analyze(body: CodeRequest, client: ChatCompletionClient = Depends(get_completion_client)):
    """Security audit of Clarity source."""
    code = _require_text(body.code, "Contract code is required", "analyze")
    return await _respond(policy_for("analyze"), analysis.security_analysis(client, code))


@router.post("/analyze-transaction")
async def analyze_transaction(body: TransactionRequest, client: ChatCompletionClient = Depends(get_completion_client)):
    if not body.transaction:
        raise InputValidationError("Transaction data is required", route="analyze-transaction")
    return await _respond(
        policy_for("analyze-transaction"),
        analysis.analyze_transaction(client, body.transaction),
    )


@router.post("/analyze-contract")
async def analyze_contract(
    body: ContractAnalysisRequest,
    client: ChatCompletionClient = Depends(get_completion_client),
):
    """Contract overview and security review; suspicious sources never reach the provider."""
    source = _require_text(body.source, "Contract source is required", "analyze-contract")
    return await _respond(
        policy_for("analyze-contract"),
        analysis.analyze_contract(client, source, body.events, body.contract_id),
    )


@router.api_route("/analyze-transaction", methods=UNSUPPORTED_METHODS, include_in_schema=False)
async def analyze_transaction_not_allowed():
    return JSONResponse(policy_for("analyze-transaction").error_body("Method not allowed"), status_code=405)


@router.api_route("/analyze-contract", methods=UNSUPPORTED_METHODS, include_in_schema=False)
async def analyze_contract_not_allowed():
    return JSONResponse(policy_for("analyze-contract").error_body("Method not allowed"), status_code=405)


@router.post("/decode")
async def decode(
    body: DecodeRequest,
    client: ChatCompletionClient = Depends(get_completion_client),
    explorer: HiroExplorerClient = Depends(get_explorer),
):
    """Fetch a transaction or contract from the explorer and analyze it."""
    value = _require_text(body.input, "Input is required").strip()

    if is_transaction_id(value):
        try:
            transaction = await explorer.get_transaction(value)
        except UpstreamDataError as exc:
            logger.error(f"Transaction lookup failed: {exc}")
            return JSONResponse({"error": str(exc)}, status_code=404)
        outcome = await _outcome(
            policy_for("analyze-transaction"),
            analysis.analyze_transaction(client, transaction),
        )
        return _wrap(outcome, kind="transaction", txId=value)

    if is_contract_id(value):
        try:
            contract = await explorer.get_contract_source(value)
        except UpstreamDataError as exc:
            logger.error(f"Contract lookup failed: {exc}")
            return JSONResponse({"error": str(exc)}, status_code=404)
        events = await explorer.get_contract_events(value)
        outcome = await _outcome(
            policy_for("analyze-contract"),
            analysis.analyze_contract(client, contract["source"], events, value),
        )
        return _wrap(
            outcome,
            kind="contract",
            contractId=value,
            sourceCode=contract["source"],
            transactionActivity=[_describe_event(event) for event in events if isinstance(event, dict)],
        )

    raise InputValidationError(
        "Invalid input format. Please enter a valid contract ID (address.contract-name) "
        "or transaction ID (0x...)"
    )


def _wrap(outcome: Tuple[int, Any], **fields: Any) -> JSONResponse:
    status_code, payload = outcome
    body = dict(fields)
    if "error" in payload:
        body["error"] = payload.pop("error")
    body["analysis"] = payload
    return JSONResponse(body, status_code=status_code)


def _describe_event(event: dict) -> dict:
    return {
        "type": event.get("event_type") or "Unknown event",
        "description": json.dumps(event.get("data") or {}),
        "timestamp": event.get("block_time"),
    }
