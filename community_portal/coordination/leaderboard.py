"""Leaderboards derived from committed records at read time.

Nothing here keeps a running rollup. The donation ranking is recounted in the
database from claimed donations on every read; the only persisted counter is
``ActorProfile.total_donated``, which changes through :func:`record_payment`.
"""

import logging
from dataclasses import dataclass

from django.db import DatabaseError

from .exceptions import Conflict, InvalidPayment
from .models import FoodDonation
from .store import ArrayUnion, Excludes, Increment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaderboardEntry:
    id: str
    name: str
    score: int
    photo_url: str = ""


def fallback_restaurant_name(restaurant_id: str) -> str:
    return f"Restaurant ({restaurant_id[:5]}...)"


def fallback_donor_name(actor_id: str) -> str:
    return f"User ({actor_id[:5]}...)"


def _restaurant_entry(store, restaurant_id, count):
    name = fallback_restaurant_name(restaurant_id)
    photo_url = ""
    try:
        profile = store.get("actor_profiles", restaurant_id)
    except DatabaseError:
        logger.exception("Profile lookup failed for restaurant %s; using fallback name", restaurant_id)
        profile = None
    if profile is not None:
        name = profile.name or name
        photo_url = profile.photo_url or ""
    return LeaderboardEntry(id=restaurant_id, name=name, score=count, photo_url=photo_url)


def donation_leaderboard(store, size=10):
    counts = store.count_by(
        "food_donations",
        "restaurant_id",
        filters=[("status", "==", FoodDonation.Status.CLAIMED)],
    )
    ranked = sorted(
        ((restaurant_id, count) for restaurant_id, count in counts.items() if restaurant_id),
        key=lambda item: (-item[1], item[0]),
    )[:size]
    return [_restaurant_entry(store, restaurant_id, count) for restaurant_id, count in ranked]


def monetary_leaderboard(store, size=10):
    profiles = store.query(
        "actor_profiles",
        filters=[("total_donated", ">", 0)],
        order=["-total_donated", "id"],
        limit=size,
    )
    return [
        LeaderboardEntry(
            id=profile.id,
            name=profile.name or fallback_donor_name(profile.id),
            score=profile.total_donated,
            photo_url=profile.photo_url or "",
        )
        for profile in profiles
    ]


def record_payment(store, actor_id, amount, session_id) -> bool:
    """Add a confirmed payment to ``actor_id``'s total, once per session.

    Returns ``False`` when ``session_id`` was already counted.
    """
    if not session_id:
        raise InvalidPayment("Missing payment session id.")
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidPayment("Payment amount must be a positive whole number.")

    try:
        store.atomic_update(
            "actor_profiles",
            actor_id,
            {
                "total_donated": Increment(amount),
                "processed_payment_sessions": ArrayUnion(session_id),
            },
            precondition={"processed_payment_sessions": Excludes(session_id)},
        )
    except Conflict:
        logger.warning("Payment session %s already counted for %s; skipping", session_id, actor_id)
        return False
    logger.info("Recorded payment of %s for %s (session %s)", amount, actor_id, session_id)
    return True
