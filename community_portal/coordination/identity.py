from dataclasses import dataclass

from .exceptions import Forbidden
from .models import ActorProfile


@dataclass(frozen=True)
class Actor:
    actor_id: str
    role: str
    display_name: str = ""

    @classmethod
    def from_profile(cls, profile):
        return cls(actor_id=profile.id, role=profile.role, display_name=profile.name)


def actor_from_request(request) -> Actor:
    """Resolve the authenticated user of ``request`` to its actor identity."""
    user = request.user
    if not user.is_authenticated:
        raise Forbidden("Login required.")
    profile = ActorProfile.objects.filter(user=user).first()
    if profile is None:
        raise Forbidden("No actor profile is linked to this account.")
    display_name = profile.name or user.get_full_name() or user.get_username()
    return Actor(actor_id=profile.id, role=profile.role, display_name=display_name)
