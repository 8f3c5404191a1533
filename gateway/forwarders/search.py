#  StyleMirror Gateway - Shopping Search Forwarder
#
#  Google Shopping results via SerpAPI. The API key is injected here and
#  never exposed to clients.
#
#  Depends on: forwarders/base.py
#  Used by:    container.py

import httpx
from starlette.requests import Request
from starlette.responses import Response

from gateway.exceptions import ValidationError
from gateway.forwarders.base import UpstreamForwarder

DEFAULT_PARAMS = {"gl": "us", "hl": "en", "num": "10"}


class SearchForwarder(UpstreamForwarder):
    name = "search"

    def __init__(self, http_client: httpx.AsyncClient, api_key: str, url: str, timeout: float):
        super().__init__(http_client, timeout)
        self._api_key = api_key
        self._url = url

    def build_params(self, request: Request) -> dict[str, str]:
        query = request.query_params.get("q")
        if not query:
            raise ValidationError("Missing query parameter")
        params = {
            "engine": "google_shopping",
            "q": query,
            "api_key": self._api_key,
        }
        for key, default in DEFAULT_PARAMS.items():
            params[key] = request.query_params.get(key) or default
        return params

    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        params = self.build_params(request)
        resp = await self._send("GET", self._url, params=params)
        return self._relay_json(resp)
