"""OpenAI-compatible chat-completion adapter.

This module:

1. Turns a ChatRequest into the `{"model", "messages"}` JSON body.
2. POSTs it to the configured endpoint with httpx and classifies failures.
3. Reduces the response body to the explanation text (`reduce_response`).

The endpoint is a static URL from configuration; no authentication header is
sent.
"""

import json
from typing import Any, Mapping, Union

import httpx

from explain_core.config.settings import require_endpoint
from explain_core.domain.exceptions import ApiError, NetworkError, ResponseParseError
from explain_core.domain.models import ChatRequest, ErrorKind, ExplainResult


def reduce_response(body: Union[bytes, str, Mapping[str, Any]]) -> ExplainResult:
    """Extract `choices[0].message.content` from a chat-completion body.

    Any deviation from that shape yields ErrorKind.RESPONSE_UNUSABLE; `detail`
    says which part was wrong.
    """

    if isinstance(body, Mapping):
        data: Any = body
    else:
        try:
            data = json.loads(body)
        except (TypeError, ValueError) as e:
            return ExplainResult.failure(ErrorKind.RESPONSE_UNUSABLE, f"invalid JSON: {e}")
    if not isinstance(data, Mapping):
        return ExplainResult.failure(ErrorKind.RESPONSE_UNUSABLE, "body is not an object")
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ExplainResult.failure(ErrorKind.RESPONSE_UNUSABLE, "no choices")
    first = choices[0]
    message = first.get("message") if isinstance(first, Mapping) else None
    if not isinstance(message, Mapping):
        return ExplainResult.failure(ErrorKind.RESPONSE_UNUSABLE, "first choice has no message")
    content = message.get("content")
    if not isinstance(content, str):
        return ExplainResult.failure(ErrorKind.RESPONSE_UNUSABLE, "message has no text content")
    return ExplainResult.success(content)


class ChatCompletionsClient:
    """Client for a single chat-completion endpoint.

    - name: client name (logs/debugging).
    - complete: async entry point, returns the explanation text.
    """

    name = "chat-completions"

    def __init__(self, settings):
        # Fails fast: a client without an endpoint cannot do anything useful
        self._settings = settings
        self._endpoint = require_endpoint(settings)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def complete(self, req: ChatRequest) -> str:
        """Send one request and return `choices[0].message.content`.

        Steps:
        1. Build the JSON payload from the full message list.
        2. POST it; transport errors (including timeouts) become NetworkError.
        3. Any status other than 200 becomes ApiError.
        4. Reduce the body; an unusable body becomes ResponseParseError.
        """

        payload = req.to_payload()
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    self._endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, endpoint=self._endpoint)
        if resp.status_code != 200:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=resp.status_code)
        result = reduce_response(resp.content)
        if not result.ok:
            raise ResponseParseError(code="UNPARSEABLE_RESPONSE", message=result.detail or "unusable response")
        return result.content
