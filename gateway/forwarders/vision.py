#  StyleMirror Gateway - Vision Forwarder
#
#  Product identification from an image via OpenRouter chat completions.
#
#  Depends on: forwarders/base.py, models/schemas.py
#  Used by:    container.py

import httpx
import pydantic
from starlette.requests import Request
from starlette.responses import Response

from gateway.exceptions import ValidationError
from gateway.forwarders.base import UpstreamForwarder, read_json_body, require_post
from gateway.models.schemas import VisionRequest

SYSTEM_PROMPT = (
    "You are a fashion and product identification expert. Analyze images to "
    "identify products for shopping. Respond with valid JSON only."
)
DEFAULT_PROMPT = (
    'Identify all products in this image. Return JSON with: searchType ("single" or "outfit"), '
    "items array with category, description, searchQuery, color, style, brand, "
    "estimatedPriceRange."
)
MAX_TOKENS = 1500
TEMPERATURE = 0.2


def normalize_image(image: str) -> str:
    """Data URLs pass through; anything else is treated as bare base64 JPEG."""
    if image.startswith("data:"):
        return image
    return f"data:image/jpeg;base64,{image}"


class VisionForwarder(UpstreamForwarder):
    name = "vision"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        url: str,
        default_model: str,
        timeout: float,
        referer: str = "",
        title: str = "",
    ):
        super().__init__(http_client, timeout)
        self._api_key = api_key
        self._url = url
        self._default_model = default_model
        self._referer = referer
        self._title = title

    def build_payload(self, body: VisionRequest) -> dict:
        return {
            "model": body.model or self._default_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": body.prompt or DEFAULT_PROMPT},
                        {"type": "image_url", "image_url": {"url": normalize_image(body.image)}},
                    ],
                },
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._title:
            headers["X-Title"] = self._title
        return headers

    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        require_post(request)
        raw = await read_json_body(request)
        try:
            body = VisionRequest.model_validate(raw)
        except pydantic.ValidationError as e:
            raise ValidationError("Invalid request body") from e
        if not body.image:
            raise ValidationError("Missing image")

        resp = await self._send("POST", self._url, headers=self._headers(), json=self.build_payload(body))
        return self._relay_json(resp)
