import hmac
import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from storefront.utils.hash import verify_password

logger = logging.getLogger(__name__)

security = HTTPBasic(auto_error=False)


def require_admin(
    request: Request,
    credentials: HTTPBasicCredentials = Depends(security),
) -> str:
    settings = request.app.state.settings

    authenticated = (
        credentials is not None
        and hmac.compare_digest(
            credentials.username.encode("utf-8"), settings.admin_username.encode("utf-8")
        )
        and verify_password(credentials.password, settings.hashed_admin_password)
    )

    if not authenticated:
        logger.warning(f"Admin authentication failed on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username
