"""
Model catalog - static list of the chat models offered in the UI.

Served by GET /api/models and used as the default candidate pool for
adaptive routing.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    provider: str
    context_length: str
    description: str
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["contextLength"] = data.pop("context_length")
        data["tags"] = list(self.tags)
        return data


AVAILABLE_MODELS: List[ModelInfo] = [
    ModelInfo(
        id="Qwen/Qwen3-Next-80B-A3B-Instruct",
        name="Qwen3-Next-80B",
        provider="bytez",
        context_length="262K (up to 1M with YaRN)",
        description="Very long context, multi-step reasoning, multilingual chat and tool calling.",
        tags=("Long Context", "Reasoning", "Code", "Multilingual"),
    ),
    ModelInfo(
        id="Qwen/Qwen3-Coder-480B-A35B-Instruct",
        name="Qwen3-Coder-480B",
        provider="bytez",
        context_length="256K",
        description="Large coding model for refactors across a repository, debugging and completion.",
        tags=("Coding", "Enterprise", "Debugging", "Refactoring"),
    ),
    ModelInfo(
        id="zai-org/GLM-4.5-Air",
        name="GLM-4.5-Air",
        provider="bytez",
        context_length="128K",
        description="Inexpensive conversational model suited to high request volume.",
        tags=("Cost-Effective", "Scalable", "Conversational", "Efficient"),
    ),
    ModelInfo(
        id="deepseek-ai/DeepSeek-V3.2-Exp",
        name="DeepSeek-V3.2-Exp",
        provider="bytez",
        context_length="128K",
        description="Document analysis and long logical chains, including legal and research material.",
        tags=("Document Analysis", "Legal", "Research", "Reasoning"),
    ),
    ModelInfo(
        id="google/gemini-2.5-pro",
        name="Gemini 2.5 Pro",
        provider="bytez",
        context_length="1M",
        description="Data analysis and planning with strong general reasoning.",
        tags=("Reasoning", "Data Analysis", "Strategic", "Creative"),
    ),
    ModelInfo(
        id="meta-llama/Llama-3.3-70B-Instruct",
        name="Llama 3.3 70B",
        provider="bytez",
        context_length="128K",
        description="General purpose model with good code feedback and tool use.",
        tags=("Coding", "General Purpose", "Multilingual", "Tools"),
    ),
    ModelInfo(
        id="moonshotai/Kimi-K2-Instruct",
        name="Kimi K2",
        provider="bytez",
        context_length="256K",
        description="Agentic problem solving, debugging and research with tool integration.",
        tags=("Autonomous", "Debugging", "Research", "Agentic"),
    ),
    ModelInfo(
        id="Qwen/Qwen2.5-7B-Instruct",
        name="Qwen 2.5 7B",
        provider="bytez",
        context_length="128K",
        description="Small, fast instruction follower for structured data and math.",
        tags=("Instruction Following", "Math", "Structured Data", "Fast"),
    ),
    ModelInfo(
        id="Qwen/Qwen2.5-Coder-7B-Instruct",
        name="Qwen 2.5 Coder 7B",
        provider="bytez",
        context_length="128K",
        description="Small coding model for generation and bug fixing.",
        tags=("Coding", "Efficient", "Bug Fixing", "Fast"),
    ),
    ModelInfo(
        id="zai-org/GLM-4-32B-0414",
        name="GLM-4 32B",
        provider="bytez",
        context_length="128K",
        description="Business and financial analysis, search and tool use.",
        tags=("Business", "Financial", "Tools", "Search"),
    ),
]

DEFAULT_MODEL_ID = "Qwen/Qwen3-Next-80B-A3B-Instruct"


def models_for_provider(provider_id: str) -> List[str]:
    return [m.id for m in AVAILABLE_MODELS if m.provider == provider_id]
