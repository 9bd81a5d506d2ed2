"""Analysis pipelines: prompt, optional pre-filter, provider call, parse, shape.

Each function raises ``GatewayError`` when the provider call fails and
``ParseError`` only for routes whose policy treats a missing JSON payload as
fatal. Everything else degrades to the route's default result.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from . import prompts
from .defaults import (
    DEFAULT_BEST_PRACTICES,
    DEFAULT_ISSUE,
    DEFAULT_SECURITY,
    DEFAULT_TEST_CASE,
    RoutePolicy,
    policy_for,
)
from .gateway import ChatCompletionClient, ChatMessage, build_request
from .parser import merge_over, parse_required, parse_with_defaults, strip_code_fences
from .prefilter import malicious_contract_report, pre_analyze_contract


logger = logging.getLogger(__name__)


async def _ask(client: ChatCompletionClient, policy: RoutePolicy, messages: List[ChatMessage]) -> str:
    request = build_request(
        messages,
        model=client.model,
        temperature=policy.temperature,
        max_tokens=policy.max_tokens,
        timeout_seconds=policy.timeout_seconds,
    )
    text = await client.complete(request)
    logger.info(f"[{policy.name}] provider response received, length: {len(text)}")
    return text


async def chat(client: ChatCompletionClient, message: str) -> Dict[str, str]:
    reply = await _ask(client, policy_for("chat"), prompts.chat_messages(message))
    return {"message": reply}


async def generate_contract(
    client: ChatCompletionClient,
    description: str,
    features: Optional[Sequence[str]] = None,
) -> Dict[str, str]:
    policy = policy_for("generate")
    text = await _ask(client, policy, prompts.generate_contract_messages(description, features))
    return {"code": strip_code_fences(text)}


async def generate_tests(client: ChatCompletionClient, code: str) -> List[Any]:
    policy = policy_for("generate-tests")
    text = await _ask(client, policy, prompts.generate_tests_messages(code))
    tests = parse_required(text, array=True)
    return [merge_over(DEFAULT_TEST_CASE, test) if isinstance(test, dict) else test for test in tests]


async def summarize(client: ChatCompletionClient, code: str) -> Dict[str, Any]:
    policy = policy_for("summarize")
    text = await _ask(client, policy, prompts.summarize_messages(code))
    return merge_over(policy.default(), parse_required(text))


async def security_analysis(client: ChatCompletionClient, code: str) -> Dict[str, Any]:
    policy = policy_for("analyze")
    text = await _ask(client, policy, prompts.security_analysis_messages(code))
    analysis = parse_with_defaults(text, policy.default())

    issues = analysis.get("issues")
    if not isinstance(issues, list):
        issues = policy.default()["issues"]
    return {
        "overallRisk": analysis["overallRisk"],
        "issues": [_normalize_issue(issue) for issue in issues if isinstance(issue, dict)],
    }


def _normalize_issue(issue: Dict[str, Any]) -> Dict[str, Any]:
    shaped = merge_over(DEFAULT_ISSUE, issue)
    return {key: shaped[key] for key in DEFAULT_ISSUE}


async def analyze_transaction(client: ChatCompletionClient, transaction: Any) -> Dict[str, Any]:
    policy = policy_for("analyze-transaction")
    text = await _ask(client, policy, prompts.transaction_analysis_messages(transaction))
    return parse_with_defaults(text, policy.default())


async def analyze_contract(
    client: ChatCompletionClient,
    source: str,
    events: Optional[Sequence[Any]] = None,
    contract_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Analyze Clarity source, short-circuiting on the malicious-pattern heuristic."""
    logger.info(f"Analyzing contract: {contract_id}")
    logger.info(f"Source code length: {len(source)} characters")
    logger.info(f"Number of events: {len(events or [])}")

    verdict = pre_analyze_contract(source)
    if verdict.is_potentially_malicious:
        logger.info("Contract detected as potentially malicious, skipping provider call")
        return malicious_contract_report(source, verdict)

    policy = policy_for("analyze-contract")
    text = await _ask(client, policy, prompts.contract_analysis_messages(source, events, contract_id))
    analysis = parse_with_defaults(text, policy.default())
    analysis["securityScore"] = str(analysis["securityScore"])

    security = merge_over(DEFAULT_SECURITY, analysis.get("security"))
    security["bestPractices"] = merge_over(DEFAULT_BEST_PRACTICES, security.get("bestPractices"))
    analysis["security"] = security
    return analysis
