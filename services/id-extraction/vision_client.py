"""HTTP client for the multimodal chat-completion API.

Uses httpx with configurable timeouts. Connection failures can be retried
with tenacity (off by default); HTTP error statuses are always terminal.
"""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from errors import InferenceApiError, ServiceNotConfigured
from prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)


class _InferenceUnreachable(InferenceApiError):
    """Request never got a response (connect error, timeout)."""


class VisionClient:
    """Chat-completion client that sends one image reference per request."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self._model = model or settings.OPENAI_MODEL
        self._max_tokens = max_tokens if max_tokens is not None else settings.OPENAI_MAX_TOKENS
        self._temperature = temperature if temperature is not None else settings.OPENAI_TEMPERATURE
        self._retry_attempts = retry_attempts if retry_attempts is not None else settings.INFERENCE_RETRY_ATTEMPTS
        self._retry_delay = retry_delay if retry_delay is not None else settings.INFERENCE_RETRY_DELAY
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.INFERENCE_RETRY_BACKOFF

        read_timeout = timeout if timeout is not None else settings.INFERENCE_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.INFERENCE_CONNECT_TIMEOUT

        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout),
                write=30.0,
                pool=30.0,
            ),
        )

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def close(self):
        self._client.close()

    def build_payload(self, image_url: str, id_type: str) -> dict:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": build_user_prompt(id_type)},
                        {
                            "type": "image_url",
                            "image_url": {"url": image_url, "detail": "high"},
                        },
                    ],
                },
            ],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    def complete(self, image_url: str, id_type: str) -> str:
        """Ask the model to read the document at ``image_url``.

        Returns the completion text. Raises InferenceApiError on a non-success
        status, an unreachable API or a response without completion text.
        """
        if not self.configured:
            raise ServiceNotConfigured("OpenAI API key not configured")

        payload = self.build_payload(image_url, id_type)
        return self._complete_with_retry(payload)

    def _complete_with_retry(self, payload: dict) -> str:
        """Retry wrapper — configured dynamically based on settings."""

        @retry(
            retry=retry_if_exception_type(_InferenceUnreachable),
            stop=stop_after_attempt(max(self._retry_attempts, 1)),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=60,
            ),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "Inference API unreachable, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        def _do_complete() -> str:
            return self._send_completion(payload)

        return _do_complete()

    def _send_completion(self, payload: dict) -> str:
        """Send a single chat-completion request."""
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            resp = self._client.post("/chat/completions", json=payload, headers=headers)
        except (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout) as e:
            logger.warning("Inference API connection failed: %s", e)
            raise _InferenceUnreachable(f"Inference API unreachable: {e}") from e
        except httpx.HTTPError as e:
            logger.error("Inference API HTTP error: %s", e)
            raise InferenceApiError(f"Inference API HTTP error: {e}") from e

        if not resp.is_success:
            # Upstream body may echo request details; keep it in the logs only
            logger.error("Inference API error %d: %s", resp.status_code, resp.text[:500])
            raise InferenceApiError(
                f"OpenAI API error: {resp.reason_phrase}",
                status_code=resp.status_code,
                status_text=resp.reason_phrase,
            )

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise InferenceApiError("OpenAI API returned no completion") from e

        if not isinstance(content, str):
            raise InferenceApiError("OpenAI API returned no completion")

        return content
