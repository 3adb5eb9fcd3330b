from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass
class GenerationOptions:
    """Per-call generation settings passed to a text scoring backend."""
    temperature: float = 0.1
    max_tokens: int = 200
    format: Optional[str] = None
    system_prompt: Optional[str] = None


@runtime_checkable
class TextScoringClient(Protocol):
    """Capability consumed by the analyzers.

    Implementations may raise any exception or return text that does not
    contain a usable score; callers must tolerate both.
    """

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        ...
