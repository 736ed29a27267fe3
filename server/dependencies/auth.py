import hmac

from fastapi import Header, HTTPException, Request


async def verify_api_key(request: Request, x_api_key: str = Header(...)) -> None:
    """Guard every route with the shared secret in APP_API_KEY.

    Raises:
        HTTPException: 503 when no key is configured, 401 when the X-Api-Key header does not match.
    """
    expected_key = request.app.state.helper_config.get_string_val("APP_API_KEY", default="")
    if not expected_key:
        request.app.state.logging.error("APP_API_KEY is not set, rejecting %s", request.url.path)
        raise HTTPException(status_code=503, detail="The server has no API key configured")
    if not hmac.compare_digest(x_api_key.encode("utf-8"), expected_key.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
