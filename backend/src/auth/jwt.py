from typing import Dict, Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from src.config import settings
from src.auth.exceptions import InvalidTokenError

def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a bearer token issued by the identity provider.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload

    Raises:
        InvalidTokenError: If the signature is wrong, the token is malformed or expired

    Note:
        Tokens are issued elsewhere; this service only verifies them with the
        shared JWT_SECRET_KEY. Expiration ('exp') is checked by jose.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired.") from e
    except JWTError as e:
        raise InvalidTokenError() from e

def get_user_id_from_token(token: str) -> str:
    """
    Extract the user id from a bearer token.

    Args:
        token: JWT token string

    Returns:
        User id from the token's 'sub' claim. Identity providers use opaque
        string ids, so it is returned as-is.

    Raises:
        InvalidTokenError: If the token is invalid or doesn't contain 'sub'

    Example:
        user_id = get_user_id_from_token(token)
    """
    payload = decode_token(token)
    user_id: Optional[Any] = payload.get("sub")

    if user_id is None or not str(user_id).strip():
        raise InvalidTokenError("Token has no subject.")

    return str(user_id)
