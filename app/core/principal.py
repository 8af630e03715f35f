from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """The authenticated actor of a request, threaded explicitly through every core operation."""
    user_id: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(user_id=user.id, is_admin=bool(user.is_superuser))
