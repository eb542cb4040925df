"""legal_mcp.tools.legal

Built-in legal reasoning tools.

Current implementation:
- legal_think
- legal_ask_followup_question
- legal_attempt_completion

NOTE
- Domain detection, citation formatting and the EU legal API verification tool
  are not part of this server. The category of a reasoning step is taken from
  the caller and defaults to ``legal_reasoning``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from legal_mcp.tools.registry import FunctionToolRegistry
from legal_mcp.utils.logger import get_logger

logger = get_logger(__name__)


DEFAULT_CATEGORY = "legal_reasoning"

CATEGORIES = [
    "analysis",
    "planning",
    "verification",
    "legal_reasoning",
    "ansc_contestation",
    "consumer_protection",
    "contract_analysis",
]

DOMAIN_GUIDANCE: dict[str, str] = {
    "ansc_contestation": (
        "Guidance for ANSC contestation analysis:\n"
        "1. Identify the specific procurement law provisions that apply\n"
        "2. Check if all required information about the contestation is collected\n"
        "3. Verify compliance with ANSC precedents and legal standards\n"
        "4. Ensure all elements of the legal test are addressed"
    ),
    "consumer_protection": (
        "Guidance for consumer protection analysis:\n"
        "1. Identify applicable consumer protection laws and regulations\n"
        "2. Analyze burden of proof requirements for each party\n"
        "3. Verify compliance with warranty and product safety requirements\n"
        "4. Ensure all consumer rights have been properly considered"
    ),
    "contract_analysis": (
        "Guidance for contract analysis:\n"
        "1. Identify the applicable Civil Code provisions\n"
        "2. Analyze the key contractual clauses and their enforceability\n"
        "3. Check for potential legal issues or ambiguities\n"
        "4. Ensure all contractual requirements are properly addressed"
    ),
    "legal_reasoning": (
        "Guidance for general legal reasoning:\n"
        "1. Identify the applicable legal framework\n"
        "2. Analyze the facts in light of relevant legal provisions\n"
        "3. Consider precedents and established legal principles\n"
        "4. Evaluate arguments from all parties involved"
    ),
}


@dataclass
class ThoughtEntry:
    thought: str
    thought_number: int
    total_thoughts: int
    next_thought_needed: bool
    category: str
    references: list[str] = field(default_factory=list)
    is_revision: bool = False
    revises_thought_number: Optional[int] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def _require_str(args: dict[str, Any], key: str) -> str:
    value = args.get(key)
    if not value or not isinstance(value, str):
        raise ValueError(f"Invalid {key}: must be a string")
    return value


def _require_int(args: dict[str, Any], key: str) -> int:
    value = args.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Invalid {key}: must be a positive integer")
    return value


class LegalTools:
    """Handlers for the built-in legal tools, sharing one thought history."""

    def __init__(self) -> None:
        self.thought_history: list[ThoughtEntry] = []

    def think(self, args: dict[str, Any]) -> dict[str, Any]:
        thought = _require_str(args, "thought")
        thought_number = _require_int(args, "thoughtNumber")
        total_thoughts = _require_int(args, "totalThoughts")
        next_thought_needed = args.get("nextThoughtNeeded")
        if not isinstance(next_thought_needed, bool):
            raise ValueError("Invalid nextThoughtNeeded: must be a boolean")

        category = args.get("category")
        if not isinstance(category, str) or category not in CATEGORIES:
            category = DEFAULT_CATEGORY

        references = args.get("references")
        revises = args.get("revisesThoughtNumber")
        self.thought_history.append(
            ThoughtEntry(
                thought=thought,
                thought_number=thought_number,
                total_thoughts=total_thoughts,
                next_thought_needed=next_thought_needed,
                category=category,
                references=[str(ref) for ref in references] if isinstance(references, list) else [],
                is_revision=bool(args.get("isRevision")),
                revises_thought_number=revises if isinstance(revises, int) else None,
            )
        )

        first_step = thought_number == 1
        guidance = None
        if args.get("requestGuidance") or first_step:
            guidance = DOMAIN_GUIDANCE.get(category, DOMAIN_GUIDANCE[DEFAULT_CATEGORY])
        template = f"Template for {category}" if args.get("requestTemplate") or first_step else None

        logger.info(f"Processed legal_think entry {thought_number}/{total_thoughts} ({category})")

        return {
            "thoughtNumber": thought_number,
            "totalThoughts": total_thoughts,
            "nextThoughtNeeded": next_thought_needed,
            "category": category,
            "guidance": guidance,
            "template": template,
            "thoughtHistoryLength": len(self.thought_history),
        }

    def ask_followup_question(self, args: dict[str, Any]) -> dict[str, Any]:
        question = _require_str(args, "question")
        options = args.get("options")
        return {
            "question": question,
            "options": options if isinstance(options, list) else [],
            "context": args.get("context"),
        }

    def attempt_completion(self, args: dict[str, Any]) -> dict[str, Any]:
        result = _require_str(args, "result")
        return {
            "result": result,
            "command": args.get("command"),
            "context": args.get("context"),
        }

    def register(self, registry: FunctionToolRegistry) -> FunctionToolRegistry:
        registry.tool(
            "legal_think",
            (
                "A tool for structured legal reasoning. Breaks a legal problem into numbered "
                "reasoning steps, keeps a history of steps and returns category-specific guidance "
                "on the first step or on request."
            ),
            {
                "type": "object",
                "properties": {
                    "thought": {"type": "string", "description": "The main legal reasoning content"},
                    "category": {
                        "type": "string",
                        "enum": CATEGORIES,
                        "description": "Category of legal reasoning (defaults to legal_reasoning)",
                    },
                    "references": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "References to laws, regulations, precedents, or previous thoughts",
                    },
                    "isRevision": {"type": "boolean"},
                    "revisesThoughtNumber": {"type": "integer"},
                    "requestGuidance": {"type": "boolean"},
                    "requestTemplate": {"type": "boolean"},
                    "thoughtNumber": {"type": "integer", "minimum": 1},
                    "totalThoughts": {"type": "integer", "minimum": 1},
                    "nextThoughtNeeded": {"type": "boolean"},
                },
                "required": ["thought", "thoughtNumber", "totalThoughts", "nextThoughtNeeded"],
            },
        )(self.think)

        registry.tool(
            "legal_ask_followup_question",
            "Ask the user a follow-up question needed to complete a legal analysis.",
            {
                "type": "object",
                "properties": {
                    "question": {"type": "string", "description": "The legal question to ask the user"},
                    "options": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "An array of 2-5 options for the user to choose from",
                    },
                    "context": {"type": "string", "description": "Additional context about the legal issue"},
                },
                "required": ["question"],
            },
        )(self.ask_followup_question)

        registry.tool(
            "legal_attempt_completion",
            "Present the result of a legal analysis as a final conclusion.",
            {
                "type": "object",
                "properties": {
                    "result": {"type": "string", "description": "The legal analysis result or conclusion"},
                    "command": {"type": "string", "description": "A CLI command to execute"},
                    "context": {"type": "string", "description": "Additional context about the legal issue"},
                },
                "required": ["result"],
            },
        )(self.attempt_completion)

        return registry


def create_legal_tool_registry() -> FunctionToolRegistry:
    """Registry with the built-in legal tools registered."""
    return LegalTools().register(FunctionToolRegistry())
