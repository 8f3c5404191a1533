#  StyleMirror Gateway - Pydantic Schemas
#
#  Inbound request bodies and outbound JSON payloads.
#
#  Depends on: (none)
#  Used by:    forwarders/*, responses.py

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Inbound bodies
# ---------------------------------------------------------------------------

class VisionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    image: str | None = None
    prompt: str | None = None
    model: str | None = None


class PerplexityRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    query: str | None = None
    model: str | None = None


# ---------------------------------------------------------------------------
# Outbound payloads
# ---------------------------------------------------------------------------

class HealthOut(BaseModel):
    status: str = "ok"
    service: str
    timestamp: str
    version: str


class ErrorOut(BaseModel):
    error: str
    message: str | None = None
