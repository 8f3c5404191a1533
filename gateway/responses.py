#  StyleMirror Gateway - JSON Response Helpers
#
#  Depends on: models/schemas.py
#  Used by:    services/gateway.py

from starlette.responses import JSONResponse

from gateway.models.schemas import ErrorOut


def json_error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    """Uniform error body: {"error": ...} plus "message" when given."""
    body = ErrorOut(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
