"""Per-route defaults and failure policy.

Both the parser (fallback values) and the error paths (failure payloads) read
from ``ROUTE_POLICIES`` so the two never drift apart.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, Optional


DEFAULT_ISSUE = {
    "severity": "medium",
    "description": "",
    "line": None,
    "snippet": None,
    "impact": None,
    "recommendation": None,
}

DEFAULT_TEST_CASE = {
    "name": "Unnamed test",
    "description": "",
    "code": "",
    "type": "unit",
    "coverage": {"functions": [], "conditions": []},
}

DEFAULT_SECURITY = {
    "issues": [],
    "bestPractices": {"followed": [], "missing": []},
}

DEFAULT_BEST_PRACTICES = {"followed": [], "missing": []}


@dataclass(frozen=True)
class RoutePolicy:
    name: str
    default_result: Any
    failure_payload: Dict[str, Any]
    failure_message: str
    parse_failure_is_fatal: bool = False
    expects_array: bool = False
    temperature: float = 0.7
    max_tokens: int = 2000
    timeout_seconds: Optional[float] = None
    gateway_failure_status: int = 500

    def default(self) -> Any:
        return copy.deepcopy(self.default_result)

    def error_body(self, message: Optional[str] = None) -> Dict[str, Any]:
        body = copy.deepcopy(self.failure_payload)
        body["error"] = message or self.failure_message
        return body


ROUTE_POLICIES: Dict[str, RoutePolicy] = {
    "chat": RoutePolicy(
        name="chat",
        default_result={"message": ""},
        failure_payload={"message": ""},
        failure_message="Failed to get AI response",
    ),
    "generate": RoutePolicy(
        name="generate",
        default_result={"code": ""},
        failure_payload={"code": ""},
        failure_message="Failed to generate contract",
        temperature=0.2,
        max_tokens=4000,
    ),
    "generate-tests": RoutePolicy(
        name="generate-tests",
        default_result=[],
        failure_payload={"tests": []},
        failure_message="Failed to generate tests",
        parse_failure_is_fatal=True,
        expects_array=True,
        temperature=0.2,
        max_tokens=4000,
    ),
    "summarize": RoutePolicy(
        name="summarize",
        default_result={
            "overview": "",
            "purpose": "",
            "features": [],
            "functions": [],
            "stateVariables": [],
            "specialNotes": [],
        },
        failure_payload={
            "overview": "",
            "purpose": "",
            "features": [],
            "functions": [],
            "stateVariables": [],
            "specialNotes": [],
        },
        failure_message="Failed to generate contract summary",
        parse_failure_is_fatal=True,
        temperature=0.1,
        max_tokens=3000,
    ),
    "analyze": RoutePolicy(
        name="analyze",
        default_result={
            "overallRisk": "medium",
            "issues": [
                {
                    "severity": "medium",
                    "description": "Unable to perform complete security analysis",
                    "line": None,
                    "snippet": None,
                    "impact": None,
                    "recommendation": "Manual review recommended",
                }
            ],
        },
        failure_payload={
            "overallRisk": "medium",
            "issues": [{"severity": "medium", "description": "Analysis failed"}],
        },
        failure_message="Failed to perform security analysis",
    ),
    "analyze-transaction": RoutePolicy(
        name="analyze-transaction",
        default_result={
            "summary": "Unable to analyze transaction",
            "txType": "Unknown",
            "operation": "Unknown operation",
            "assets": [],
            "contracts": [],
            "details": {},
        },
        failure_payload={
            "summary": "Error during analysis",
            "txType": "Unknown",
            "operation": "Unknown",
            "assets": [],
            "contracts": [],
            "details": {"error": "The system encountered an error while analyzing this transaction"},
        },
        failure_message="Failed to analyze transaction",
        temperature=0.1,
        max_tokens=2000,
    ),
    "analyze-contract": RoutePolicy(
        name="analyze-contract",
        default_result={
            "summary": "Analysis completed with limited information",
            "description": (
                "The contract was analyzed but detailed information could not be extracted. "
                "The contract appears to be a Clarity smart contract on the Stacks blockchain."
            ),
            "securityScore": "50",
            "riskLevel": "MEDIUM",
            "features": ["Unknown features"],
            "functions": ["Unknown functions"],
            "security": {
                "issues": [
                    {
                        "severity": "MEDIUM",
                        "description": "Unable to perform complete security analysis",
                        "recommendation": "Manual review recommended",
                    }
                ],
                "bestPractices": {"followed": [], "missing": ["Complete analysis not available"]},
            },
        },
        failure_payload={
            "summary": "Potential security concerns detected",
            "description": (
                "This contract could not be analyzed. Manual review by a security expert is "
                "strongly recommended before interacting with this contract."
            ),
            "securityScore": "0",
            "riskLevel": "HIGH",
            "features": [],
            "functions": [],
            "security": {
                "issues": [
                    {
                        "severity": "HIGH",
                        "description": "Analysis failed, contract could not be assessed",
                        "recommendation": (
                            "Do not interact with this contract without thorough review by a security expert"
                        ),
                    }
                ],
                "bestPractices": {"followed": [], "missing": ["Proper documentation", "Clear purpose"]},
            },
        },
        failure_message="Failed to analyze contract",
        temperature=0.1,
        max_tokens=4000,
        timeout_seconds=30.0,
        gateway_failure_status=200,
    ),
}


def policy_for(route: str) -> RoutePolicy:
    return ROUTE_POLICIES[route]
