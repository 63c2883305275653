"""Security utilities: bearer JWT authentication and request context."""
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import jwt
from fastapi import Depends, HTTPException, Request, status

from config import get_config
from services.logging_utils import get_logger, log_extra

logger = get_logger(__name__)

ANONYMOUS = "anonymous"


def _client_ip(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


@dataclass
class RequestContext:
    request_id: str
    subject: str
    client_ip: str

    @property
    def authenticated(self) -> bool:
        return self.subject != ANONYMOUS

    @property
    def user_id(self) -> Optional[str]:
        return self.subject if self.authenticated else None


def decode_token(token: str) -> str:
    """Validate ``token`` and return its ``sub`` claim."""
    config = get_config()
    claims = jwt.decode(
        token,
        config.JWT_SECRET,
        algorithms=["HS256"],
        audience=config.JWT_AUDIENCE,
        issuer=config.JWT_ISSUER or None,
        options={"verify_aud": bool(config.JWT_AUDIENCE), "require": ["sub"]},
    )
    return str(claims["sub"])


def get_request_context(request: Request) -> RequestContext:
    existing = getattr(request.state, "request_context", None)
    if existing is not None:
        return existing

    config = get_config()
    req_id = request.headers.get(config.REQUEST_ID_HEADER, str(uuid4()))
    client_ip = _client_ip(request)

    auth_header = request.headers.get("authorization")
    subject = ANONYMOUS

    if auth_header and auth_header.lower().startswith("bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        try:
            subject = decode_token(token)
        except jwt.PyJWTError as exc:
            logger.warning("JWT validation failed", extra=log_extra(error=str(exc), request_id=req_id))
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    context = RequestContext(request_id=req_id, subject=subject, client_ip=client_ip)
    request.state.request_context = context
    return context


async def require_user(context: RequestContext = Depends(get_request_context)) -> RequestContext:
    if not context.authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return context
