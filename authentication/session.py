from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
    """
    The authenticated principal for a single request.

    Built from the user row on every request, so role changes and
    deactivation take effect immediately.
    """

    user_id: int
    role: str
    username: str = ""
    full_name: str = ""

    @classmethod
    def from_user(cls, user) -> "Session":
        return cls(
            user_id=user.pk,
            role=user.role,
            username=user.username,
            full_name=user.full_name,
        )

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


def session_from_request(request) -> Session:
    """
    Session for the user an API auth class or the session middleware
    resolved for this request.
    """
    user = getattr(request, "auth", None)
    if user is None or not getattr(user, "is_authenticated", False):
        user = request.user
    return Session.from_user(user)
