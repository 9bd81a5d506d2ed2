"""System instructions and message builders for every analysis route.

Each builder returns exactly two messages: the route's fixed system
instruction followed by one user message carrying the task. Caller data is
interpolated as-is; structured values are embedded with ``json.dumps``.
"""

import json
from typing import Any, List, Optional, Sequence

from .gateway import ChatMessage


ASSISTANT_INSTRUCTIONS = """You are ClarityAI, an AI assistant specialized in the Stacks blockchain ecosystem. You help users understand:

1. Stacks blockchain architecture and capabilities
2. Clarity smart contract development
3. Network features and cross-chain interactions with Bitcoin
4. Performance metrics and statistics
5. Best practices for building on Stacks

Keep responses concise, technical but approachable, and always accurate. If uncertain, admit limitations."""

CONTRACT_GENERATION_INSTRUCTIONS = """You are a smart contract generation AI specialized in creating secure and optimized Clarity smart contracts for the Stacks blockchain. Follow these strict guidelines:

1. Use Clarity language features optimized for Stacks:
   - Post-conditions for transaction safety
   - Principal types for addresses
   - Built-in Bitcoin integration
   - Trait support for interfaces

2. Security and standards:
   - Follow Clarity security best practices
   - Use safe arithmetic operations
   - Implement proper authorization checks
   - Add post-conditions for sensitive operations

3. Code structure:
   - Include comprehensive documentation
   - Add detailed inline comments
   - Implement proper error handling
   - Use modular design patterns"""

CONTRACT_SUMMARY_INSTRUCTIONS = """You are a smart contract analyzer specialized in explaining Clarity contracts in a clear, human-readable format. For each contract:

1. Provide a high-level overview of what the contract does
2. Explain the main features and functionality
3. Break down important functions and their purposes
4. Identify key data variables and maps and their roles
5. Highlight any special mechanisms or patterns used
6. Note any external interactions or dependencies
7. Explain access control and permissions

Format your response in this structure:
{
  "overview": "Brief 1-2 sentence description of what the contract does",
  "purpose": "Detailed explanation of the contract's main purpose and use cases",
  "features": [{"name": "Feature name", "description": "What this feature does"}],
  "functions": [{"name": "Function name", "purpose": "What it does", "access": "Who can call it"}],
  "stateVariables": [{"name": "Variable name", "purpose": "What it is used for"}],
  "specialNotes": ["Important notes about security, patterns, or special considerations"]
}"""

SECURITY_ANALYSIS_INSTRUCTIONS = """You are a smart contract security auditor specialized in analyzing Clarity contracts for the Stacks blockchain. For each analysis:

1. Check for common vulnerabilities in Clarity
2. Review post-conditions implementation
3. Analyze principal handling and authorization
4. Check Bitcoin integration security
5. Verify proper read-only vs read-write separation
6. Assess data variable persistence patterns
7. Review Clarity type safety

Provide your analysis in this JSON format:
{
  "overallRisk": "high|medium|low",
  "issues": [
    {
      "severity": "high|medium|low",
      "description": "Clear explanation of the issue",
      "line": "Line number if applicable",
      "snippet": "Relevant code snippet showing the issue",
      "impact": "Description of potential impact",
      "recommendation": "Specific recommendation to fix the issue"
    }
  ]
}"""

TEST_GENERATION_INSTRUCTIONS = """You are a smart contract test suite generator specialized in creating comprehensive tests for Clarity contracts on Stacks. Generate tests that:

1. Cover contract functionality
2. Include post-condition tests
3. Test principal authorization
4. Verify Bitcoin integration
5. Check read-only functions
6. Test data persistence

Return a JSON array where each test case looks like:
{
  "name": "Test case name",
  "description": "What this test verifies",
  "code": "Complete test code in Clarity",
  "type": "unit|integration|security",
  "coverage": {
    "functions": ["Function names covered"],
    "conditions": ["Post-conditions tested"]
  }
}"""

TRANSACTION_ANALYSIS_INSTRUCTIONS = """You are a Stacks blockchain transaction analyzer. Your task is to analyze transaction data and provide a clear, human-readable explanation.

Return your analysis in this JSON format:
{
  "summary": "One sentence summary of what this transaction does",
  "txType": "The transaction type (contract-call, token-transfer, etc)",
  "operation": "The specific operation being performed",
  "assets": [{"type": "STX or token name", "amount": "Amount transferred", "from": "Sender address", "to": "Recipient address"}],
  "contracts": [{"id": "Contract identifier", "action": "What this transaction does with the contract"}],
  "details": {
    "function": "Function called if applicable",
    "args": ["Function arguments"],
    "result": "Transaction result if available"
  }
}"""

CONTRACT_ANALYSIS_INSTRUCTIONS = """You are ClarityAI, an expert in analyzing Clarity smart contracts for the Stacks blockchain.

Your task is to analyze contracts and provide detailed, accurate information in the following JSON structure:

{
  "summary": "A concise 1-2 sentence summary of what the contract does",
  "description": "A more detailed explanation of the contract's purpose and functionality",
  "securityScore": "A number from 0-100 reflecting the contract's security",
  "riskLevel": "HIGH, MEDIUM, or LOW based on security analysis",
  "features": ["List of key features this contract implements"],
  "functions": ["List of public functions and what they do"],
  "security": {
    "issues": [
      {"severity": "HIGH/MEDIUM/LOW", "description": "Description of the security issue", "recommendation": "How to fix or mitigate the issue"}
    ],
    "bestPractices": {
      "followed": ["Security best practices the contract follows"],
      "missing": ["Important security practices the contract should implement"]
    }
  }
}

Be thorough in your analysis, especially regarding security concerns, but don't invent issues if none exist."""

MAX_PROMPT_EVENTS = 5


def build_messages(system: str, user: str) -> List[ChatMessage]:
    return [ChatMessage("system", system), ChatMessage("user", user)]


def chat_messages(message: str) -> List[ChatMessage]:
    return build_messages(ASSISTANT_INSTRUCTIONS, message)


def generate_contract_messages(description: str, features: Optional[Sequence[str]] = None) -> List[ChatMessage]:
    features_section = ""
    if features:
        features_section = "Features:\n" + "\n".join(f"- {feature}" for feature in features)

    prompt = (
        "Generate a Clarity smart contract for Stacks blockchain:\n\n"
        f"Description: {description}\n\n"
        f"{features_section}\n\n"
        "Requirements:\n"
        "1. Use proper Clarity syntax and types\n"
        "2. Implement post-conditions for safety\n"
        "3. Use appropriate principal handling\n"
        "4. Consider Bitcoin integration\n"
        "5. Add comprehensive documentation\n\n"
        "Return clean Clarity code with detailed comments."
    )
    return build_messages(CONTRACT_GENERATION_INSTRUCTIONS, prompt)


def generate_tests_messages(code: str) -> List[ChatMessage]:
    prompt = (
        "Generate a comprehensive test suite for this Clarity smart contract:\n\n"
        f"{code}\n\n"
        "Create tests that:\n"
        "1. Cover all major contract functionality\n"
        "2. Include unit tests for individual functions\n"
        "3. Add integration tests for contract interactions\n"
        "4. Implement security-focused test cases\n"
        "5. Check execution cost limits\n\n"
        "Return an array of test cases in the specified JSON format with name, "
        "description, code, type and coverage fields."
    )
    return build_messages(TEST_GENERATION_INSTRUCTIONS, prompt)


def summarize_messages(code: str) -> List[ChatMessage]:
    prompt = (
        "Analyze this Clarity smart contract and provide a clear, human-readable summary:\n\n"
        f"{code}\n\n"
        "Please explain:\n"
        "1. What the contract does\n"
        "2. Its main features and functionality\n"
        "3. Important functions and their purposes\n"
        "4. Key data variables and maps\n"
        "5. Any special mechanisms or patterns\n"
        "6. External interactions\n"
        "7. Access control and permissions\n\n"
        "Return the analysis in the specified JSON format with overview, purpose, "
        "features, functions, stateVariables, and specialNotes."
    )
    return build_messages(CONTRACT_SUMMARY_INSTRUCTIONS, prompt)


def security_analysis_messages(code: str) -> List[ChatMessage]:
    prompt = (
        "Analyze this Clarity smart contract for security issues:\n\n"
        f"{code}\n\n"
        "Focus on:\n"
        "1. Authorization vulnerabilities\n"
        "2. Post-condition coverage\n"
        "3. Principal validation\n"
        "4. Asset handling\n"
        "5. Read/write function separation\n"
        "6. Data persistence issues\n"
        "7. Bitcoin integration security"
    )
    return build_messages(SECURITY_ANALYSIS_INSTRUCTIONS, prompt)


def transaction_analysis_messages(transaction: Any) -> List[ChatMessage]:
    prompt = (
        "Analyze this Stacks blockchain transaction:\n\n"
        f"{json.dumps(transaction, indent=2)}\n\n"
        "Provide a comprehensive analysis following the JSON format in your instructions."
    )
    return build_messages(TRANSACTION_ANALYSIS_INSTRUCTIONS, prompt)


def contract_analysis_messages(
    source: str,
    events: Optional[Sequence[Any]] = None,
    contract_id: Optional[str] = None,
) -> List[ChatMessage]:
    events_section = ""
    if events:
        recent = list(events)[:MAX_PROMPT_EVENTS]
        events_section = f"Recent contract events/transactions:\n{json.dumps(recent, indent=2)}\n"

    prompt = (
        f"Please analyze this Clarity smart contract {contract_id or ''}:\n\n"
        f"```\n{source}\n```\n\n"
        f"{events_section}\n"
        "Provide a comprehensive analysis following the JSON format in your instructions. Include:\n"
        "1. Overall purpose and functionality\n"
        "2. Security score (0-100) and risk level\n"
        "3. Key features and public functions\n"
        "4. Security issues with severity levels\n"
        "5. Best practices followed and missing"
    )
    return build_messages(CONTRACT_ANALYSIS_INSTRUCTIONS, prompt)
