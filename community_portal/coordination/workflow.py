from .exceptions import Forbidden, InvalidTransition
from .models import ActorProfile, FoodDonation, FoodRequest, Issue, Opportunity

Role = ActorProfile.Role

HELPER_ROLES = frozenset({Role.CITIZEN, Role.VOLUNTEER})
ORGANISATION_ROLES = frozenset({Role.NGO, Role.RESTAURANT})


class Workflow:
    """Allowed status transitions of one entity type and who may trigger them.

    ``transitions`` maps a current status to ``{target: roles}``. A target
    missing from the map is structurally illegal for every caller.
    """

    def __init__(self, name, transitions):
        self.name = name
        self.transitions = {
            current: {target: frozenset(roles) for target, roles in targets.items()}
            for current, targets in transitions.items()
        }

    def roles_into(self, target):
        roles = set()
        for targets in self.transitions.values():
            roles.update(targets.get(target, ()))
        return frozenset(roles)

    def check(self, current, target, role):
        allowed = self.transitions.get(current, {})
        if target not in allowed:
            raise InvalidTransition(f"A {self.name} cannot move from '{current}' to '{target}'.")
        if role not in allowed[target]:
            raise Forbidden(f"Role '{role}' cannot move a {self.name} to '{target}'.")


ISSUE_WORKFLOW = Workflow(
    "issue",
    {
        Issue.Status.PENDING: {
            Issue.Status.IN_PROGRESS: {Role.NGO},
            Issue.Status.RESOLVED: {Role.NGO},
        },
        Issue.Status.IN_PROGRESS: {
            Issue.Status.RESOLVED: {Role.NGO},
        },
        Issue.Status.RESOLVED: {},
    },
)

FOOD_REQUEST_WORKFLOW = Workflow(
    "food request",
    {
        FoodRequest.Status.PENDING: {
            FoodRequest.Status.ACCEPTED: {Role.RESTAURANT},
            FoodRequest.Status.REJECTED: {Role.RESTAURANT},
        },
        FoodRequest.Status.ACCEPTED: {},
        FoodRequest.Status.REJECTED: {},
    },
)

# Sign ups move an opportunity between open and full through the allocation
# planner; only closing goes through this table.
OPPORTUNITY_WORKFLOW = Workflow(
    "opportunity",
    {
        Opportunity.Status.OPEN: {
            Opportunity.Status.CLOSED: {Role.NGO},
        },
        Opportunity.Status.FULL: {
            Opportunity.Status.CLOSED: {Role.NGO},
        },
        Opportunity.Status.CLOSED: {},
    },
)

DONATION_WORKFLOW = Workflow(
    "food donation",
    {
        FoodDonation.Status.AVAILABLE: {
            FoodDonation.Status.CLAIMED: HELPER_ROLES,
            FoodDonation.Status.UNAVAILABLE: {Role.RESTAURANT},
        },
        FoodDonation.Status.CLAIMED: {},
        FoodDonation.Status.UNAVAILABLE: {},
    },
)

# Resubmitting details while pending keeps the status; a rejected
# organisation re-enters review by resubmitting.
VERIFICATION_WORKFLOW = Workflow(
    "registration",
    {
        ActorProfile.Verification.PENDING: {
            ActorProfile.Verification.APPROVED: {Role.SUPERADMIN},
            ActorProfile.Verification.REJECTED: {Role.SUPERADMIN},
        },
        ActorProfile.Verification.REJECTED: {
            ActorProfile.Verification.PENDING: ORGANISATION_ROLES,
        },
        ActorProfile.Verification.APPROVED: {},
    },
)
