import logging
from jose.exceptions import JOSEError

from settings_api.schemas.auth_schema import SignIn
from settings_api.utils.errors import AuthError, BackendError
from settings_api.utils.security import authenticate, create_access_token

logger = logging.getLogger(__name__)

async def sign_in(credentials: SignIn):
    if not authenticate(credentials.username, credentials.password):
        logger.warning(f"Rejected sign-in for user {credentials.username!r}")
        raise AuthError("incorrect username or password")

    try:
        token = create_access_token(credentials.username)
    except JOSEError as e:
        logger.error(f"Failed to sign token: {e}")
        raise BackendError("failed to sign token") from e

    return {"token": token}
