import json
import logging
from typing import Iterator, List, Optional

import requests

from hearing_scribe.core.config.settings import settings
from hearing_scribe.core.common.exceptions import ConfigurationError, ProviderError
from ..domain.interfaces import IChatModel
from ..domain.models import ChatMessage

logger = logging.getLogger(__name__)

SSE_PREFIX = "data: "
SSE_DONE = "data: [DONE]"


def parse_sse_line(line: str) -> Optional[str]:
    """
    Extracts the delta token from one server-sent-event line.
    Returns None for keep-alives, the [DONE] marker, non-data lines and malformed chunks.
    """
    trimmed = (line or "").strip()
    if not trimmed or trimmed == SSE_DONE:
        return None
    if not trimmed.startswith(SSE_PREFIX):
        return None
    try:
        payload = json.loads(trimmed[len(SSE_PREFIX):])
        content = payload["choices"][0]["delta"].get("content")
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        return None
    return content or None


class AzureChatAdapter(IChatModel):
    """
    Azure OpenAI chat-completions deployment over plain HTTP.
    """

    def __init__(self,
                 endpoint: Optional[str] = None,
                 api_key: Optional[str] = None,
                 deployment: Optional[str] = None,
                 api_version: Optional[str] = None,
                 timeout: Optional[int] = None,
                 http: Optional[requests.Session] = None):
        self.endpoint = (endpoint if endpoint is not None else settings.AZURE_OPENAI_ENDPOINT).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AZURE_OPENAI_API_KEY
        self.deployment = deployment or settings.CHAT_DEPLOYMENT
        self.api_version = api_version or settings.CHAT_API_VERSION
        self.timeout = timeout or settings.LLM_TIMEOUT_SEC
        self.http = http or requests.Session()

    @property
    def url(self) -> str:
        return (f"{self.endpoint}/openai/deployments/{self.deployment}"
                f"/chat/completions?api-version={self.api_version}")

    def ensure_configured(self) -> None:
        if not self.endpoint or not self.api_key:
            raise ConfigurationError("AZURE_OPENAI_ENDPOINT or AZURE_OPENAI_API_KEY is not set")

    def _body(self, messages: List[ChatMessage], max_tokens: int,
              temperature: Optional[float] = None, stream: bool = False) -> dict:
        body = {
            "messages": [m.to_dict() for m in messages],
            "max_completion_tokens": max_tokens,
        }
        if temperature is not None:
            body["temperature"] = temperature
        if stream:
            body["stream"] = True
        return body

    def _post(self, body: dict, stream: bool = False) -> requests.Response:
        self.ensure_configured()
        try:
            res = self.http.post(
                self.url,
                headers={"Content-Type": "application/json", "api-key": self.api_key},
                json=body,
                stream=stream,
                timeout=self.timeout
            )
        except requests.Timeout as e:
            raise ProviderError(f"LLM API timeout ({self.timeout}s)") from e
        except requests.RequestException as e:
            raise ProviderError(f"LLM API unreachable: {e}") from e

        if not res.ok:
            snippet = (res.text or "")[:settings.PROVIDER_ERROR_SNIPPET_CHARS]
            logger.error(f"LLM API error {res.status_code}: {snippet}")
            raise ProviderError(f"LLM API {res.status_code}: {snippet}", status_code=res.status_code)
        return res

    def complete(self, messages: List[ChatMessage], max_tokens: int,
                 temperature: Optional[float] = None) -> str:
        res = self._post(self._body(messages, max_tokens, temperature))
        try:
            data = res.json()
        except ValueError as e:
            raise ProviderError(f"LLM API returned a non-JSON body: {e}") from e

        if data is None:
            return ""
        if not isinstance(data, dict):
            raise ProviderError(f"LLM API returned an unexpected body: {str(data)[:200]}")

        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise ProviderError(f"LLM API returned unexpected choices: {str(choices)[:200]}")
        if not choices:
            return ""

        first = choices[0]
        if not isinstance(first, dict):
            raise ProviderError(f"LLM API returned an unexpected choice: {str(first)[:200]}")
        message = first.get("message") or {}
        if not isinstance(message, dict):
            raise ProviderError(f"LLM API returned an unexpected message: {str(message)[:200]}")

        content = message.get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ProviderError(f"LLM API returned non-text content: {type(content).__name__}")
        return content

    def stream(self, messages: List[ChatMessage], max_tokens: int) -> Iterator[str]:
        res = self._post(self._body(messages, max_tokens, stream=True), stream=True)
        try:
            # Lines arrive as raw UTF-8 bytes
            for raw in res.iter_lines():
                line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
                token = parse_sse_line(line)
                if token:
                    yield token
        finally:
            res.close()
