import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from studx.database.connection import mongo_db_dependency
from studx.repositories.user_repository import UserRepository
from studx.utils.errors import ForbiddenError, UnauthorizedError
from studx.utils.security import decode_access_token


logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db=Depends(mongo_db_dependency),
) -> dict:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No token provided. Please login.")
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired. Please login again.")
    except jwt.InvalidTokenError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise UnauthorizedError("Invalid token. Please login again.")

    user_id = payload.get("sub")
    user = await UserRepository(db).get_user_by_id(user_id) if user_id else None
    if not user:
        raise UnauthorizedError("User not found. Please login again.")
    if not user.get("is_verified", False):
        raise ForbiddenError("Email not verified.")
    return user
