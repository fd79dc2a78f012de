## Gemini through its OpenAI-compatible endpoint
from .groq import GroqOpenAIClient

class GeminiOpenAIClient(GroqOpenAIClient):
    """Same chat-completions wire format; only the base URL and key differ."""
