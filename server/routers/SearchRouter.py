from fastapi import APIRouter, Depends, Request, Response

from server.dependencies.auth import get_remote_user
from server.models.requests import InboundRequest
from server.models.responses import OutboundResponse

router = APIRouter(tags=["search"])


def to_inbound(request: Request, remote_user: str | None) -> InboundRequest:
    """Copy the parts of the FastAPI request the services work with."""
    params: dict[str, str] = {}
    # the first occurrence of a repeated parameter wins
    for name, value in request.query_params.multi_items():
        params.setdefault(name, value)
    return InboundRequest(
        url=str(request.url),
        params=params,
        headers={name.lower(): value for name, value in request.headers.items()},
        remote_user=remote_user,
    )


def to_response(outbound: OutboundResponse) -> Response:
    return Response(
        content=outbound.body,
        status_code=outbound.status_code,
        media_type=outbound.media_type,
        headers=outbound.headers,
    )


@router.get("/ExecuteQuery.aspx")
@router.get("/search")
async def execute_query(
    request: Request,
    remote_user: str | None = Depends(get_remote_user),
) -> Response:
    """Search Livelink and return the results as OpenSearch RSS or HTML.

    Args:
        request (Request): FastAPI request (provides app.state.search_service).
        remote_user (str | None): The authenticated portal user.

    Returns:
        Response: RSS, HTML or the error status; always fully buffered.
    """
    search_service = request.app.state.search_service
    return to_response(await search_service.execute(to_inbound(request, remote_user)))


@router.get("/GetOSDX.aspx")
@router.get("/osdx")
async def get_descriptor(request: Request) -> Response:
    """Return the OpenSearch descriptor for the connector parameters in the URL."""
    descriptor_service = request.app.state.descriptor_service
    return to_response(await descriptor_service.describe(to_inbound(request, None)))
