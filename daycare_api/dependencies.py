from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from daycare_api.config import get_settings
from daycare_api.database import get_db
from daycare_api.services.identity import Caller
from daycare_api.services.messaging import MessagingService
from daycare_api.ws import notify_message_sent

settings = get_settings()
security = HTTPBearer()


def decode_caller(token: str) -> Caller:
    """Build a Caller from an identity-provider token.

    ``sub`` carries the user id, ``roles`` a list of role names (a single
    string is accepted too). Raises ValueError on anything unusable.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise ValueError(str(e))

    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token has no subject")

    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return Caller(id=UUID(str(subject)), roles=frozenset(roles))


async def get_current_caller(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Caller:
    """Get current caller from the bearer token"""
    try:
        return decode_caller(credentials.credentials)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_messaging_service(db: AsyncSession = Depends(get_db)) -> MessagingService:
    return MessagingService(db, notifier=notify_message_sent)
