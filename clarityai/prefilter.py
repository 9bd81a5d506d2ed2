import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


logger = logging.getLogger(__name__)

SWAP_PATTERN = re.compile(r"swap-\d+")
CONTRACT_CALL_PATTERN = re.compile(r"contract-call\?\s+'([^'\s()]+)")
PUBLIC_FUNCTION_PATTERN = re.compile(r"define-public\s+\(([^\s()]+)")

# More than this many swap-N references counts as a repetitive pattern.
REPETITIVE_SWAP_THRESHOLD = 5


@dataclass(frozen=True)
class PreAnalysisVerdict:
    is_potentially_malicious: bool = False
    repetitive_patterns: bool = False
    suspicious_contracts: Tuple[str, ...] = field(default=())
    repetitive_ops: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isPotentiallyMalicious": self.is_potentially_malicious,
            "repetitivePatterns": self.repetitive_patterns,
            "suspiciousContracts": list(self.suspicious_contracts),
            "repetitiveOps": self.repetitive_ops,
        }


def pre_analyze_contract(source: str) -> PreAnalysisVerdict:
    """Scan Clarity source for repeated swaps combined with external contract calls."""
    swap_count = len(SWAP_PATTERN.findall(source))
    repetitive = swap_count > REPETITIVE_SWAP_THRESHOLD

    # dict.fromkeys keeps first-seen order
    contracts = tuple(dict.fromkeys(CONTRACT_CALL_PATTERN.findall(source)))

    verdict = PreAnalysisVerdict(
        is_potentially_malicious=repetitive and bool(contracts),
        repetitive_patterns=repetitive,
        suspicious_contracts=contracts,
        repetitive_ops=swap_count if repetitive else 0,
    )
    logger.info(f"Pre-analysis results: {verdict.to_dict()}")
    return verdict


def extract_public_functions(source: str) -> List[str]:
    return PUBLIC_FUNCTION_PATTERN.findall(source)


def malicious_contract_report(source: str, verdict: PreAnalysisVerdict) -> Dict[str, Any]:
    """Fixed high-risk contract analysis returned instead of calling the provider."""
    return {
        "summary": "Potential security risk detected in this contract",
        "description": (
            "This contract contains patterns commonly found in malicious contracts. "
            f"It makes multiple repetitive operations ({verdict.repetitive_ops} similar calls detected) "
            "which may indicate an attempt to drain funds or abuse a protocol."
        ),
        "securityScore": "10",
        "riskLevel": "HIGH",
        "features": ["Multiple repetitive operations", "External contract calls"],
        "functions": extract_public_functions(source) or ["Unknown functions"],
        "security": {
            "issues": [
                {
                    "severity": "HIGH",
                    "description": (
                        f"Multiple repetitive swap operations detected ({verdict.repetitive_ops} occurrences), "
                        "a common pattern in malicious contracts"
                    ),
                    "recommendation": (
                        "Review the contract carefully before interacting with it. "
                        "Consider consulting a security expert."
                    ),
                },
                {
                    "severity": "HIGH",
                    "description": (
                        "Suspicious external contract calls to "
                        f"{', '.join(verdict.suspicious_contracts)}"
                    ),
                    "recommendation": "Verify the legitimacy of these external contracts",
                },
            ],
            "bestPractices": {
                "followed": [],
                "missing": [
                    "Avoid repetitive identical operations",
                    "Include proper documentation for contract purpose",
                    "Implement reasonable operation limits",
                ],
            },
        },
    }
