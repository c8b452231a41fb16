"""
Intent Classifier - decides whether a prompt is a composite request.

A composite request needs two dependent generations: text first, then an
image derived from that text. Detection is plain substring matching over
three constant tables, so a keyword inside a longer word still matches
("imagery" contains "image").

    composite = (has_token and has_visual_keyword) or has_phrase
"""

from typing import Tuple

# Sequencing connectives that chain two actions
COMPOSITE_TOKENS: Tuple[str, ...] = (
    " and ",
    " then ",
    " after that ",
    " afterwards ",
    " finally ",
    " followed by ",
    " plus ",
)

# Whole phrasings that are composite on their own. Each one names a visual artifact.
COMPOSITE_PHRASES: Tuple[str, ...] = (
    "explain and create an image",
    "explain and draw a picture",
    "explain with a diagram",
    "explain with an image",
    "turn this into a diagram",
    "turn this into an image",
    "turn this into a chart",
    "summarize and visualize",
    "show me a diagram of",
)

# Visual artifacts the image step can produce
VISUAL_KEYWORDS: Tuple[str, ...] = (
    "image",
    "diagram",
    "chart",
    "flowchart",
    "picture",
    "illustration",
    "graph",
    "visual",
    "infographic",
    "sketch",
    "drawing",
    "mind map",
    "mindmap",
)


def has_token(prompt_lower: str) -> bool:
    return any(token in prompt_lower for token in COMPOSITE_TOKENS)


def has_phrase(prompt_lower: str) -> bool:
    return any(phrase in prompt_lower for phrase in COMPOSITE_PHRASES)


def has_visual_keyword(prompt_lower: str) -> bool:
    return any(keyword in prompt_lower for keyword in VISUAL_KEYWORDS)


def is_composite(prompt_lower: str) -> bool:
    """Classify a lowercased prompt as composite (text then image).

    Pure and deterministic. Returns False for empty or non-matching input.
    """
    if not prompt_lower:
        return False
    return (has_token(prompt_lower) and has_visual_keyword(prompt_lower)) or has_phrase(prompt_lower)
