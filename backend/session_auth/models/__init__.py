from session_auth.models.refresh_token import RefreshToken
from session_auth.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
