## Error taxonomy for the roadmap pipeline
import httpx
import openai
from sqlalchemy.exc import SQLAlchemyError


class MalformedOutput(ValueError):
    """The provider answered, but the text is not a usable roadmap."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Provider did not return valid JSON: {detail}")


# Generation call failures (network, auth, rate limit). Never wrapped.
ProviderError = (openai.APIError, httpx.HTTPError)


class InvalidUserId(ValueError):
    """The opaque user id cannot be turned into a store reference."""


# Persistence failures, including the user id conversion done at write time.
StorageError = (SQLAlchemyError, InvalidUserId)


def classify_error(exc: BaseException) -> str:
    """Label a pipeline failure for logs and run records; propagation is unchanged."""
    if isinstance(exc, MalformedOutput):
        return "malformed_output"
    if isinstance(exc, ProviderError):
        return "provider"
    if isinstance(exc, StorageError):
        return "storage"
    return "unknown"
