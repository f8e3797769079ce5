import jwt
from datetime import datetime, timedelta, timezone
from django.conf import settings
from django.contrib.auth import get_user_model
from ninja.security import HttpBearer
from django.http import HttpRequest


class JWTAuth(HttpBearer):
    """JWT Authentication for Django Ninja"""

    def authenticate(self, request: HttpRequest, token: str):
        """Verify JWT token and return the active user it names"""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.InvalidTokenError:
            return None

        user_id = payload.get('user_id')
        if not user_id:
            return None
        User = get_user_model()
        # Deactivated accounts lose API access even with an unexpired token
        return User.objects.filter(id=user_id, is_active=True).first()


def create_access_token(user) -> str:
    """Create JWT access token for user"""
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user.id,
        'username': user.username,
        'role': user.role,
        'exp': now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        'iat': now
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# Global instance
jwt_auth = JWTAuth()
