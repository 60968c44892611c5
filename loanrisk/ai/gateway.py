"""Gateway to the generative-model oracle and tolerant JSON decoding of its replies."""

from abc import ABC, abstractmethod
import json
import logging
import re
from typing import Any, Optional

from google import genai

from .exceptions import OracleConfigurationError, OracleDecodeError


logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```json([\s\S]*?)```", re.IGNORECASE)


def decode_json_response(raw: Optional[str]) -> Any:
    """Decode oracle text into a JSON value.

    Tries, in order: the trimmed text as JSON, the body of a ```json fence,
    and the span from the first ``{`` to the last ``}``.

    Raises:
        OracleDecodeError: If none of the attempts parse.
    """
    cleaned = (raw or "").strip()

    try:
        return json.loads(cleaned)
    except ValueError:
        pass

    fence_match = _JSON_FENCE.search(cleaned)
    if fence_match and fence_match.group(1):
        try:
            return json.loads(fence_match.group(1).strip())
        except ValueError:
            pass

    first_brace = cleaned.find("{")
    last_brace = cleaned.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        try:
            return json.loads(cleaned[first_brace : last_brace + 1])
        except ValueError:
            pass

    logger.error("Failed to parse oracle JSON response raw=%r", raw)
    raise OracleDecodeError("Failed to parse oracle JSON response")


class OracleTransport(ABC):
    """Minimal capability for sending one prompt and receiving text back."""

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Send a single-turn prompt and return the concatenated reply text."""


class GeminiTransport(OracleTransport):
    """Google Gemini transport built on the ``google-genai`` SDK."""

    def __init__(self, api_key: str, model_name: str) -> None:
        self._model_name = model_name
        self._client = genai.Client(api_key=api_key)
        logger.info("Gemini transport initialized model=%s", model_name)

    def generate(self, prompt: str) -> str:
        response = self._client.models.generate_content(
            model=self._model_name,
            contents=prompt,
        )
        if not response.candidates:
            return ""
        content = response.candidates[0].content
        if content is None or not content.parts:
            return ""
        all_text = ""
        for part in content.parts:
            if part.text is not None:
                all_text += part.text
        return all_text


class OracleGateway:
    """Sends compiled prompts to the oracle and decodes the JSON it returns.

    The gateway does not retry, does not time out and does not check the
    shape of decoded values; callers own validation.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str,
        transport: Optional[OracleTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model_name = model_name
        self._transport = transport
        if not api_key:
            logger.warning("Oracle credential is not set. Calls to the gateway will fail until it is configured.")

    @property
    def model_name(self) -> str:
        """Model identifier recorded in risk profile provenance."""
        return self._model_name

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _get_transport(self) -> OracleTransport:
        if self._transport is None:
            self._transport = GeminiTransport(api_key=self._api_key, model_name=self._model_name)
        return self._transport

    def invoke(self, prompt: str) -> Any:
        """Send ``prompt`` to the oracle and return the decoded JSON value.

        Raises:
            OracleConfigurationError: If no credential is configured.
            OracleDecodeError: If the reply holds no parseable JSON.
        """
        if not self._api_key:
            raise OracleConfigurationError(
                "Oracle client not configured. Please set GEMINI_API_KEY in your environment."
            )

        logger.info("Calling oracle model=%s", self._model_name)
        text = self._get_transport().generate(prompt)
        return decode_json_response(text or "")
