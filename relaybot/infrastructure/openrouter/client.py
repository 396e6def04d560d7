"""
OpenRouter client adapter - Infrastructure implementation of LLM client protocol.
Handles communication with OpenRouter through its OpenAI-compatible API.
"""

from __future__ import annotations
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
import jsonschema
from openai import APIError, AsyncOpenAI

from ...domain.errors import ClassificationError, StreamTransportError
from ...domain.interfaces.llm_client import LLMClient, ReasoningOptions
from ...domain.models.stream import StreamDelta, Usage


# Route to the fastest fp8 providers
PROVIDER_PREFERENCES: Dict[str, Any] = {
    "sort": "throughput",
    "quantizations": ["fp8"],
}


class OpenRouterAdapter(LLMClient):
    """Adapter for OpenRouter implementing LLMClient protocol."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://openrouter.ai/api/v1",
        connect_timeout_s: float = 10.0,
        read_timeout_s: float = 300.0,
        client: Optional[AsyncOpenAI] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._logger = logger or logging.getLogger(__name__)

        # No SDK retries; a failed stream surfaces once
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
            timeout=httpx.Timeout(read_timeout_s, connect=connect_timeout_s),
        )

        self._logger.info(f"OpenRouter adapter initialized - Base URL: {base_url}")

    async def stream_chat(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        reasoning: Optional[ReasoningOptions] = None
    ) -> AsyncIterator[StreamDelta]:
        """Send streaming chat request and yield content/reasoning deltas."""
        extra_body: Dict[str, Any] = {"provider": PROVIDER_PREFERENCES}
        if reasoning is not None:
            extra_body["reasoning"] = reasoning.to_api_format()

        self._logger.debug(f"Opening stream - Model: {model}, Messages: {len(messages)}")
        try:
            stream = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                stream=True,
                stream_options={"include_usage": True},
                extra_body=extra_body,
            )
            async for chunk in stream:
                delta = _delta_from_chunk(chunk)
                if not delta.is_empty:
                    yield delta
        except APIError as e:
            status = getattr(e, "status_code", None)
            self._logger.debug(f"OpenRouter streaming request failed: {e}")
            raise StreamTransportError(f"OpenRouter API error: {e}", status_code=status) from e
        except httpx.HTTPError as e:
            self._logger.debug(f"OpenRouter stream transport failed: {e}")
            raise StreamTransportError(f"OpenRouter transport error: {e}") from e

    async def complete_structured(
        self,
        messages: List[Dict[str, Any]],
        model: str,
        schema_name: str,
        schema: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Run a strict JSON-schema completion and return the validated object."""
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": schema_name,
                        "strict": True,
                        "schema": schema,
                    },
                },
            )
        except (APIError, httpx.HTTPError) as e:
            raise ClassificationError(schema_name, f"request failed: {e}") from e

        try:
            raw = response.choices[0].message.content or ""
            payload = json.loads(raw)
            jsonschema.validate(instance=payload, schema=schema)
        except (IndexError, AttributeError, json.JSONDecodeError) as e:
            raise ClassificationError(schema_name, f"unparseable response: {e}") from e
        except jsonschema.ValidationError as e:
            raise ClassificationError(schema_name, f"schema violation: {e.message}") from e

        return payload

    async def close(self) -> None:
        self._logger.debug("Closing OpenRouter client")
        await self._client.close()


def _delta_from_chunk(chunk: Any) -> StreamDelta:
    """Pull content, reasoning and usage out of one SDK chunk."""
    content = ""
    reasoning = ""
    choices = getattr(chunk, "choices", None) or []
    if choices:
        delta = getattr(choices[0], "delta", None)
        if delta is not None:
            content = getattr(delta, "content", None) or ""
            # OpenRouter sends reasoning as an extra field the SDK keeps untyped
            reasoning = getattr(delta, "reasoning", None) or ""
            if not reasoning:
                extra = getattr(delta, "model_extra", None) or {}
                reasoning = extra.get("reasoning") or ""
    return StreamDelta(
        content=content,
        reasoning=reasoning,
        usage=Usage.from_api(getattr(chunk, "usage", None)),
    )
