from typing import Generator, Optional
from fastapi import Depends, Header
import logging

from routinesense.core.cache import get_local_cache
from routinesense.core.context import SessionContext
from routinesense.core.security import verify_token
from routinesense.database import MongoRemoteStore, SKIN_PROFILES

logger = logging.getLogger(__name__)

def get_remote_store() -> MongoRemoteStore:
    return MongoRemoteStore()

def get_current_user_id(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """User id from a Bearer token; None means guest mode"""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    user_id = verify_token(authorization.replace("Bearer ", ""))
    if user_id is None:
        logger.info("Invalid or expired token, continuing as guest")
    return user_id

def _skin_profile_loader(remote, user_id: Optional[str]):
    def load():
        if not user_id:
            return None
        try:
            documents = remote.find(SKIN_PROFILES, {"user_id": user_id}, limit=1)
        except Exception as e:
            logger.warning(f"Could not load skin profile for {user_id}: {e}")
            return None
        return documents[0].get("profile") if documents else None
    return load

def local_cache_namespace(user_id: Optional[str], device_id: Optional[str]) -> str:
    """Cache namespace scoped by identity first, so a device id can never reach another user's cache"""
    owner = f"user:{user_id}" if user_id else "guest"
    return f"{owner}:device:{device_id or 'default'}"

def get_session_context(
    user_id: Optional[str] = Depends(get_current_user_id),
    remote: MongoRemoteStore = Depends(get_remote_store),
    x_device_id: Optional[str] = Header(None),
) -> Generator[SessionContext, None, None]:
    """One SessionContext per request, closed when the response is done"""
    context = SessionContext(
        user_id=user_id,
        remote=remote,
        local_cache=get_local_cache(local_cache_namespace(user_id, x_device_id)),
        skin_profile_provider=_skin_profile_loader(remote, user_id),
    )
    try:
        yield context
    finally:
        context.close()
