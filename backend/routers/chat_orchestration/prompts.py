"""
System prompt construction and task-intent inference.

The latest user message drives two lightweight regex classifications:

- infer_task_intent(): coarse task type used by the Adaptive Router
- build_system_prompt(): base prompt plus one "success means ..." sentence
"""

import re
from typing import List, Optional, Sequence, Tuple

from services.providers import Message

BASE_SYSTEM_PROMPT = (
    "You are MelonScope, an assistant that shapes each answer to what the user is trying to do.\n"
    "Be precise and useful.\n"
    "Reason fully; do not cut corners on thinking.\n"
    "Leave out filler.\n"
    "Match the tone and depth of the question."
)

# Fenced code block or a source-file extension
_CODE_FENCE = re.compile(r"```[\s\S]*```")
_FILE_EXT = re.compile(r"\w\.(js|ts|py|java|cpp|go|rs|rb|php)\b")

_CODE_WORDS = re.compile(
    r"\b(bug|fix|optimi[sz]e|error|debug|refactor|implement|code|function|class|method|"
    r"compile|syntax|runtime|exception|stack trace)\b"
)

# (pattern, modifier) - first match wins
_MODIFIER_RULES: List[Tuple[re.Pattern, str]] = [
    (
        re.compile(r"\b(revise|quick|test|exam|recap|refresh|summary|tldr|brief|fast|short)\b"),
        "Success means the user can recall and use this right away after a short read.",
    ),
    (
        _CODE_WORDS,
        "Success means the user can apply the solution directly without wading through explanation.",
    ),
    (
        re.compile(
            r"\b(design|architecture|compare|versus|vs|tradeoff|trade-off|pros and cons|"
            r"evaluate|assess|structure|organi[sz]e|plan)\b"
        ),
        "Success means the user can make a clear decision from the tradeoffs.",
    ),
    (
        re.compile(
            r"\b(explain|why|how does|how do|what is|what are|understand|concept|theory|meaning|reason|cause)\b"
        ),
        "Success means the user understands the reasoning, not only the final answer.",
    ),
    (
        re.compile(r"\b(step by step|steps|walkthrough|tutorial|guide|how to|show me how)\b"),
        "Success means the user can follow the process and finish it alone.",
    ),
    (
        re.compile(r"\b(ideas|brainstorm|creative|suggest|possibilities|alternatives|options|what if)\b"),
        "Success means the user leaves with concrete options to explore.",
    ),
    (
        re.compile(r"(\bjust tell me\b|\banswer\b|\bwhat's the\b|\bgive me\b|\bneed to know\b)"),
        "Success means the user gets the answer without digging through elaboration.",
    ),
]

_TASK_RULES: List[Tuple[str, re.Pattern]] = [
    ("coding", _CODE_WORDS),
    (
        "reasoning",
        re.compile(
            r"\b(design|architecture|compare|versus|tradeoff|trade-off|pros and cons|evaluate|"
            r"prove|derive|analy[sz]e|explain|why)\b"
        ),
    ),
    (
        "creative",
        re.compile(r"\b(ideas|brainstorm|creative|story|poem|imagine|suggest|what if|slogan|names?)\b"),
    ),
]


def latest_user_message(messages: Sequence[Message]) -> Optional[Message]:
    for message in reversed(messages):
        if message.role == "user":
            return message
    return None


def _modifier_for(text: str) -> str:
    lower = text.lower()
    if _CODE_FENCE.search(text) or _FILE_EXT.search(lower):
        return _MODIFIER_RULES[1][1]
    for pattern, modifier in _MODIFIER_RULES:
        if pattern.search(lower):
            return modifier
    return ""


def infer_task_intent(text: str) -> str:
    """Map a user message to coding, reasoning, creative or general."""
    lower = text.lower()
    if _CODE_FENCE.search(text) or _FILE_EXT.search(lower):
        return "coding"
    for intent, pattern in _TASK_RULES:
        if pattern.search(lower):
            return intent
    return "general"


def build_system_prompt(messages: Sequence[Message]) -> str:
    """Base prompt, plus a success modifier chosen from the latest user message."""
    latest = latest_user_message(messages)
    if latest is None:
        return BASE_SYSTEM_PROMPT

    modifier = _modifier_for(latest.content)
    if modifier:
        return f"{BASE_SYSTEM_PROMPT}\n\n{modifier}"
    return BASE_SYSTEM_PROMPT


def build_messages(
    custom_system_prompt: Optional[str],
    conversation: Sequence[Message],
) -> List[Message]:
    """Assemble the upstream message list.

    Order: the chosen system prompt (custom when non-blank, else built),
    then any system messages the caller supplied, then the rest of the
    conversation in its original order.
    """
    if custom_system_prompt and custom_system_prompt.strip():
        system_prompt = custom_system_prompt
    else:
        system_prompt = build_system_prompt(conversation)

    supplied_system = [m for m in conversation if m.role == "system"]
    rest = [m for m in conversation if m.role != "system"]
    return [Message("system", system_prompt), *supplied_system, *rest]
