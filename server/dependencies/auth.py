from fastapi import Request


async def get_remote_user(request: Request) -> str | None:
    """Return the portal user authenticated by the fronting web server or proxy.

    The connector does not authenticate users itself; the proxy puts the login
    name (e.g. ``DOMAIN\\user``) to the header configured by REMOTE_USER_HEADER.

    Args:
        request (Request): The FastAPI request object (provides app.state).

    Returns:
        str | None: The login name, or None if the header was not sent.
    """
    helper_config = request.app.state.helper_config
    header = helper_config.get_string_val("REMOTE_USER_HEADER", default="X-Remote-User")
    remote_user = request.headers.get(header, "").strip()
    return remote_user or None
