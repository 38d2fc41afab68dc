from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from google import genai
from google.genai import types


@dataclass(frozen=True)
class SamplingConfig:
    temperature: Optional[float] = None
    top_k: Optional[int] = None
    top_p: Optional[float] = None


class TextGenerator(Protocol):
    """External text-generation endpoint: prompt in, free text out."""

    def generate(self, *, model: str, prompt: str, sampling: Optional[SamplingConfig] = None) -> Optional[str]:
        raise NotImplementedError


class GeminiTextGenerator(TextGenerator):
    def __init__(self, api_key: str):
        self._client = genai.Client(api_key=api_key)

    def generate(self, *, model: str, prompt: str, sampling: Optional[SamplingConfig] = None) -> Optional[str]:
        config = None
        if sampling is not None:
            config = types.GenerateContentConfig(
                temperature=sampling.temperature,
                top_k=sampling.top_k,
                top_p=sampling.top_p,
            )
        response = self._client.models.generate_content(model=model, contents=prompt, config=config)
        return response.text
