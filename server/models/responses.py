from pydantic import BaseModel, ConfigDict


class OutboundResponse(BaseModel):
    """Complete response produced by a service; the body is fully buffered before it is sent."""

    model_config = ConfigDict(frozen=True)

    status_code: int = 200
    media_type: str = "text/xml"
    body: bytes = b""
    headers: dict[str, str] = {}
