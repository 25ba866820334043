"""
HTTP client for Ollama model endpoints (local server or Ollama cloud).

**Conceptual**: A thin wrapper around the two Ollama APIs the schema
generator uses. It handles request construction, authentication, HTTP error
mapping and response parsing, and returns the model's raw text answer. It
does NOT interpret that text; `response_parser` turns it into a Schema.

**Endpoints**:
  - local: POST {local_endpoint} with {"model", "prompt", "stream": false};
    answer in the "response" field.
  - cloud: POST {cloud_endpoint} with {"model", "messages": [...], "stream": false}
    and an `Authorization: Bearer <key>` header; answer in "message.content".
"""

from typing import Any, Dict

import requests

from csv_migration.config.settings import AI_MODE_LOCAL, GeneratorSettings
from csv_migration.utils.logging_config import get_logger

logger = get_logger(__name__)


class OllamaClientError(Exception):
    """
    Base exception for Ollama client errors.

    Callers can catch OllamaClientError to handle every model-call failure,
    or one of the subclasses for finer handling.
    """
    pass


class OllamaAuthenticationError(OllamaClientError):
    """
    Raised on 401 Unauthorized / 403 Forbidden.

    **Recovery**: Check OLLAMA_API_KEY in .env, verify it's still valid.
    """
    pass


class OllamaModelNotFoundError(OllamaClientError):
    """
    Raised on 404 Not Found (model not pulled locally, or unknown model name).

    **Recovery**: `ollama pull <model>` or fix CSV_MIGRATION_*_MODEL.
    """
    pass


class OllamaRateLimitError(OllamaClientError):
    """Raised on 429 Too Many Requests."""
    pass


class OllamaServerError(OllamaClientError):
    """Raised when the endpoint returns a 5xx server error."""
    pass


class OllamaClient:
    """
    Thin HTTP client for Ollama generate/chat endpoints.

    **Example usage**:
        >>> from csv_migration.config.settings import GeneratorSettings
        >>> settings = GeneratorSettings(mode="local")
        >>> with OllamaClient(settings) as client:
        ...     text = client.generate("Return [] as JSON")
    """

    def __init__(self, settings: GeneratorSettings):
        """
        Initialize the client with generator settings.

        Args:
            settings: Mode, model names, endpoints, API key and timeout.
        """
        self.settings = settings
        self.session = requests.Session()

        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "csv_migration/1.0",
        })
        if self.settings.mode != AI_MODE_LOCAL:
            self.session.headers["Authorization"] = f"Bearer {self.settings.api_key}"

    def generate(self, prompt: str) -> str:
        """
        Send a prompt to the configured model and return its text answer.

        Args:
            prompt: Full instruction prompt.

        Returns:
            The model's answer, unmodified.

        Raises:
            ValueError: If the prompt is empty.
            OllamaAuthenticationError: 401/403.
            OllamaModelNotFoundError: 404.
            OllamaRateLimitError: 429.
            OllamaServerError: 5xx.
            requests.Timeout: If the request exceeds the timeout.
            OllamaClientError: Connection failures, other 4xx, bad JSON, or a
                              response without the expected answer field.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        if self.settings.mode == AI_MODE_LOCAL:
            payload: Dict[str, Any] = {
                "model": self.settings.model,
                "prompt": prompt,
                "stream": False,
            }
        else:
            payload = {
                "model": self.settings.model,
                "messages": [{"role": "user", "content": prompt}],
                "stream": False,
            }

        data = self._post(payload)

        if self.settings.mode == AI_MODE_LOCAL:
            answer = data.get("response")
        else:
            message = data.get("message")
            answer = message.get("content") if isinstance(message, dict) else None

        if not isinstance(answer, str):
            raise OllamaClientError(
                f"Response missing model answer ({self._answer_field()}). "
                f"Keys: {list(data.keys())}"
            )

        logger.info(
            "ollama_response",
            mode=self.settings.mode,
            model=self.settings.model,
            answer_chars=len(answer),
        )
        return answer

    def _answer_field(self) -> str:
        return "response" if self.settings.mode == AI_MODE_LOCAL else "message.content"

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST payload to the active endpoint and return the decoded JSON object."""
        url = self.settings.endpoint
        logger.info(
            "ollama_request",
            mode=self.settings.mode,
            model=self.settings.model,
            endpoint=url,
        )

        try:
            response = self.session.post(
                url,
                json=payload,
                timeout=self.settings.timeout_seconds,
            )

            if response.status_code == 401 or response.status_code == 403:
                raise OllamaAuthenticationError(
                    f"Authentication failed (status {response.status_code}). "
                    f"Check your OLLAMA_API_KEY. Response: {response.text}"
                )

            if response.status_code == 404:
                raise OllamaModelNotFoundError(
                    f"Model '{self.settings.model}' or endpoint {url} not found. "
                    f"Response: {response.text}"
                )

            if response.status_code == 429:
                raise OllamaRateLimitError(
                    f"Rate limit exceeded. Slow down requests. Response: {response.text}"
                )

            if response.status_code >= 500:
                raise OllamaServerError(
                    f"Ollama server error (status {response.status_code}). "
                    f"Response: {response.text}"
                )

            if 400 <= response.status_code < 500:
                raise OllamaClientError(
                    f"Client error (status {response.status_code}). "
                    f"Request may be malformed. Response: {response.text}"
                )

            response.raise_for_status()

            try:
                data = response.json()
            except ValueError as e:
                raise OllamaClientError(
                    f"Failed to parse JSON response: {e}. Response: {response.text}"
                ) from e

            if not isinstance(data, dict):
                raise OllamaClientError(
                    f"Expected a JSON object response, got {type(data).__name__}"
                )

            return data

        except requests.Timeout as e:
            raise requests.Timeout(
                f"Request to {url} timed out after {self.settings.timeout_seconds}s. "
                f"Check the endpoint or increase CSV_MIGRATION_TIMEOUT_SECONDS."
            ) from e

        except requests.ConnectionError as e:
            raise OllamaClientError(
                f"Failed to connect to Ollama at {url}. "
                f"Check that the server is running and the endpoint is correct."
            ) from e

        except requests.RequestException as e:
            raise OllamaClientError(f"HTTP request failed: {e}") from e

    def close(self):
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self):
        """Enable context manager support (with statement)."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up session when exiting context manager."""
        self.close()
        return False
