"""Client for an OpenAI-compatible chat completion endpoint.

One prompt in, one text completion out. The default endpoint is BigModel's
GLM API; any service speaking the ``/chat/completions`` format works.
"""

import logging
from typing import Optional

import requests

from ..config import Config, get_config
from ..errors import UpstreamServiceError

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """Client for a chat completion API."""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str,
        model: str,
        timeout: float = 30,
    ):
        """Initialize client.

        Args:
            api_key: Bearer token for the service
            api_url: Full URL of the chat completions endpoint
            model: Model name sent with each request
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self._session.headers.update({"Authorization": f"Bearer {api_key}"})

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "ChatCompletionClient":
        """Create a client from application configuration."""
        config = config or get_config()
        return cls(
            api_key=config.llm_api_key,
            api_url=config.llm_api_url,
            model=config.llm_model,
            timeout=config.llm_timeout,
        )

    def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Send a single user prompt and return the completion text.

        Args:
            prompt: The prompt text
            temperature: Sampling temperature
            max_tokens: Completion length limit (optional)

        Returns:
            Completion text, stripped; empty string if the service sent none

        Raises:
            UpstreamServiceError: If the key is missing or the request fails
        """
        if not self.api_key:
            raise UpstreamServiceError("Missing text generation API key on server")

        payload: dict = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        try:
            response = self._session.post(self.api_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout:
            logger.error("Text generation request timed out after %ss", self.timeout)
            raise UpstreamServiceError("Text generation request timed out")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            logger.error("Text generation HTTP error: %s", status)
            raise UpstreamServiceError(f"Text generation service returned HTTP {status}")
        except requests.exceptions.RequestException as e:
            logger.error("Text generation request failed: %s", e)
            raise UpstreamServiceError(f"Text generation request failed: {e}")
        except ValueError:
            raise UpstreamServiceError("Text generation service returned invalid JSON")

        return _extract_content(data)


def _extract_content(data: object) -> str:
    """Pull ``choices[0].message.content`` out of a response body."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        # Some providers send content as a list of typed parts
        content = "".join(
            part.get("text", "")
            for part in content
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    if not isinstance(content, str):
        return ""
    return content.strip()
