import logging
from typing import MutableMapping, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)

USER_ID_KEY = "user_id"


def sign_in_anonymously(session: MutableMapping, fixed_user_id: Optional[str] = None) -> str:
    """Return the session's user id, creating an anonymous one on first visit."""
    user_id = session.get(USER_ID_KEY)
    if user_id:
        return user_id
    user_id = fixed_user_id or uuid4().hex
    session[USER_ID_KEY] = user_id
    logger.info("Signed in anonymous user %s", user_id)
    return user_id
