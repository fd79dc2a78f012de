from goalmap.settings import Settings
from goalmap.agents.llm.base import LLMClient
from goalmap.agents.llm.gemini import GeminiOpenAIClient
from goalmap.agents.llm.ollama import OllamaOpenAIClient
from goalmap.agents.llm.groq import GroqOpenAIClient
from goalmap.logging import get_logger

logger = get_logger(__name__)

def get_llm_client(settings: Settings) -> LLMClient:
    provider = settings.LLM_PROVIDER.lower()
    logger.info("Initializing LLM client", provider=provider)

    if provider == "groq":
        return GroqOpenAIClient(
            api_key=settings.GROQ_API_KEY,
            base_url=settings.GROQ_BASE_URL,
            model=settings.GROQ_MODEL,
        )

    if provider == "gemini":
        return GeminiOpenAIClient(
            api_key=settings.GEMINI_API_KEY,
            base_url=settings.GEMINI_BASE_URL,
            model=settings.GEMINI_MODEL,
        )

    if provider != "ollama":
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")

    return OllamaOpenAIClient(
        base_url = settings.ollama_base_url,
        model = settings.ollama_model,
    )
