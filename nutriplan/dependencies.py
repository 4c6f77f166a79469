# request dependencies — resolves the bearer token to the practitioner owning the request

import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bson import ObjectId
from bson.errors import InvalidId

from nutriplan.services.auth_service import decode_token
from nutriplan.services.db import Database, get_db

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Database = Depends(get_db),
) -> dict:
    """practitioner document for a valid access token, with "id" as a string.
    refresh tokens, unknown subjects and malformed ids all answer 401."""
    payload = decode_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Invalid or expired token")
    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Token missing subject")

    try:
        practitioner = await db.users.find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        practitioner = None
    if not practitioner:
        logger.warning(f"Token subject {user_id} has no practitioner record")
        raise _unauthorized("User not found")

    practitioner["id"] = str(practitioner.pop("_id"))
    return practitioner
