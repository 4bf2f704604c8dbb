"""Allocation planning for opportunity seats and food donation claims.

Every ``plan_*`` function inspects a freshly read record and either raises
the allocation error that applies or returns an :class:`Allocation`: the
field operations to commit and the precondition under which they are still
valid. Nothing here writes; the coordinator commits plans through
``DjangoEntityStore.atomic_update``.

Seat allocation (opportunities) admits up to ``spots`` distinct claimants.
Exclusive claim (donations) is the capacity-one case: the first committed
claim wins and every later one fails.
"""

from dataclasses import dataclass, field

from .exceptions import AlreadyClaimed, AlreadySignedUp, Full, NotAvailable, NotOpen, NotOwner, NotSignedUp
from .models import FoodDonation, Opportunity
from .store import ArrayRemove, ArrayUnion, ServerTimestamp, Set

ADDED = "added"
REMOVED = "removed"
CLAIMED = "claimed"
UPDATED = "updated"


@dataclass(frozen=True)
class Allocation:
    outcome: str
    changes: dict
    precondition: dict = field(default_factory=dict)


@dataclass(frozen=True)
class AllocationResult:
    outcome: str
    record: object


def plan_sign_up(opportunity, actor_id) -> Allocation:
    volunteers = opportunity.volunteers
    if actor_id in volunteers:
        raise AlreadySignedUp()
    if opportunity.status == Opportunity.Status.CLOSED:
        raise NotOpen()
    if opportunity.status == Opportunity.Status.FULL or len(volunteers) >= opportunity.spots:
        raise Full()
    if opportunity.status != Opportunity.Status.OPEN:
        raise NotOpen()

    changes = {"signed_up_volunteers": ArrayUnion(actor_id)}
    if len(volunteers) + 1 >= opportunity.spots:
        changes["status"] = Set(Opportunity.Status.FULL)
    return Allocation(
        ADDED,
        changes,
        precondition={"status": opportunity.status, "signed_up_volunteers": volunteers},
    )


def plan_cancel_sign_up(opportunity, actor_id) -> Allocation:
    # Cancelling always reopens, even when other seats are still taken or the
    # opportunity had been closed. Kept unconditional on purpose.
    if actor_id not in opportunity.volunteers:
        raise NotSignedUp()
    return Allocation(
        REMOVED,
        {
            "signed_up_volunteers": ArrayRemove(actor_id),
            "status": Set(Opportunity.Status.OPEN),
        },
    )


def plan_claim(donation, actor_id, volunteer_name="", notes="", phone="") -> Allocation:
    if donation.status == FoodDonation.Status.CLAIMED:
        raise AlreadyClaimed()
    if donation.status != FoodDonation.Status.AVAILABLE:
        raise NotAvailable()
    return Allocation(
        CLAIMED,
        {
            "status": Set(FoodDonation.Status.CLAIMED),
            "claimed_by_volunteer_id": Set(actor_id),
            "volunteer_name": Set(volunteer_name or "Unknown Volunteer"),
            "claimed_at": ServerTimestamp(),
            "volunteer_pickup_notes": Set(notes or ""),
            "volunteer_phone_number": Set(phone or ""),
        },
        precondition={"status": FoodDonation.Status.AVAILABLE},
    )


def lost_claim_error(donation):
    """Error to report once a claim lost the race for ``donation``."""
    if donation is not None and donation.status == FoodDonation.Status.UNAVAILABLE:
        return NotAvailable()
    return AlreadyClaimed()


def plan_mark_unavailable(donation, restaurant_id) -> Allocation:
    if donation.restaurant_id != restaurant_id:
        raise NotOwner()
    if donation.status != FoodDonation.Status.AVAILABLE:
        raise NotAvailable()
    return Allocation(
        UPDATED,
        {"status": Set(FoodDonation.Status.UNAVAILABLE)},
        precondition={"status": FoodDonation.Status.AVAILABLE},
    )
