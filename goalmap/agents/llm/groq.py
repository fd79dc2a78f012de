from typing import List

from openai import OpenAI
from .base import LLMClient, Message

class GroqOpenAIClient(LLMClient):
    def __init__(self, * , api_key: str | None, base_url: str, model: str):
        self.client = OpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    def generate_text(self, *, messages: List[Message], temperature: float = 0.2) -> str:
        resp = self.client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            messages=messages,
        )
        return resp.choices[0].message.content or ""
