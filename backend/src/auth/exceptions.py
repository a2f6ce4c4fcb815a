from src.common.exceptions import AppError

class AuthError(AppError):
    """Base class for all authentication exceptions."""
    pass

class InvalidTokenError(AuthError):
    """
    Raised when a bearer token is invalid, malformed, expired or has no subject.

    Used by:
    - jwt.py: decode_token() when the token cannot be verified
    - jwt.py: get_user_id_from_token() when the token doesn't contain a 'sub' claim
    """
    def __init__(self, detail: str = "Token is invalid."):
        self.message = detail
        super().__init__(detail)
