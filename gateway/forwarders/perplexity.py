#  StyleMirror Gateway - Perplexity Forwarder
#
#  Shopping research queries via Perplexity chat completions.
#
#  Depends on: forwarders/base.py, models/schemas.py
#  Used by:    container.py

import httpx
import pydantic
from starlette.requests import Request
from starlette.responses import Response

from gateway.exceptions import ValidationError
from gateway.forwarders.base import UpstreamForwarder, read_json_body, require_post
from gateway.models.schemas import PerplexityRequest

SYSTEM_PROMPT = (
    "You are a smart shopping assistant. Find the best products and prices. "
    "Respond with valid JSON only."
)
MAX_TOKENS = 2000
TEMPERATURE = 0.2


class PerplexityForwarder(UpstreamForwarder):
    name = "perplexity"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        url: str,
        default_model: str,
        timeout: float,
    ):
        super().__init__(http_client, timeout)
        self._api_key = api_key
        self._url = url
        self._default_model = default_model

    def build_payload(self, body: PerplexityRequest) -> dict:
        return {
            "model": body.model or self._default_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": body.query},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        require_post(request)
        raw = await read_json_body(request)
        try:
            body = PerplexityRequest.model_validate(raw)
        except pydantic.ValidationError as e:
            raise ValidationError("Invalid request body") from e
        if not body.query:
            raise ValidationError("Missing query")

        resp = await self._send(
            "POST",
            self._url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
            json=self.build_payload(body),
        )
        return self._relay_json(resp)
