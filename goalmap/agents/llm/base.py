## Base LLM Client Interface
from abc import ABC, abstractmethod
from typing import List, TypedDict


class Message(TypedDict):
    role: str
    content: str


class LLMClient(ABC):
    @abstractmethod
    def generate_text(self, * , messages: List[Message], temperature: float = 0.2) -> str:
        raise NotImplementedError
