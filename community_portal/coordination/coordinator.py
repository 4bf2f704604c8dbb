"""Entry point of the coordination core.

:class:`Coordinator` checks legality with the status workflows and the
capability matcher, asks the allocation planner for the field operations to
apply, and commits them through the injected entity store. Domain errors
propagate to the caller unchanged. The one retry in this module is the
sign-up retry after a lost optimistic update.
"""

import logging

from django.conf import settings

from . import allocation, leaderboard, matching
from .exceptions import (
    Conflict,
    Forbidden,
    IncompleteRegistration,
    InvalidTransition,
    NoFocusAreasConfigured,
    NotAvailable,
    NotFound,
)
from .models import ActorProfile, FoodDonation, FoodRequest, Issue, Opportunity
from .store import ServerTimestamp, Set
from .workflow import (
    DONATION_WORKFLOW,
    FOOD_REQUEST_WORKFLOW,
    HELPER_ROLES,
    ISSUE_WORKFLOW,
    OPPORTUNITY_WORKFLOW,
    ORGANISATION_ROLES,
    VERIFICATION_WORKFLOW,
)

logger = logging.getLogger(__name__)

Role = ActorProfile.Role

SIGN_UP_ATTEMPTS = 2


def _setting(name, override):
    if override is not None:
        return override
    return settings.COORDINATION[name]


class Coordinator:
    def __init__(
        self,
        store,
        *,
        filter_in_limit=None,
        reviewer_issue_limit=None,
        leaderboard_size=None,
        listing_limit=None,
        donation_history_limit=None,
    ):
        self.store = store
        self.filter_in_limit = _setting("FILTER_IN_LIMIT", filter_in_limit)
        self.reviewer_issue_limit = _setting("REVIEWER_ISSUE_LIMIT", reviewer_issue_limit)
        self.leaderboard_size = _setting("LEADERBOARD_SIZE", leaderboard_size)
        self.listing_limit = _setting("LISTING_LIMIT", listing_limit)
        self.donation_history_limit = _setting("DONATION_HISTORY_LIMIT", donation_history_limit)
        self._dashboards = {
            Role.CITIZEN: self._citizen_dashboard,
            Role.VOLUNTEER: self._volunteer_dashboard,
            Role.NGO: self._ngo_dashboard,
            Role.RESTAURANT: self._restaurant_dashboard,
            Role.SUPERADMIN: self._superadmin_dashboard,
        }

    def _require_role(self, actor, roles, action):
        if actor.role not in roles:
            raise Forbidden(f"Role '{actor.role}' cannot {action}.")

    def _get(self, collection, pk):
        record = self.store.get(collection, pk)
        if record is None:
            raise NotFound(f"No {collection} record with id {pk}.")
        return record

    def _focus_areas(self, actor):
        profile = self.store.get("actor_profiles", actor.actor_id)
        return list(profile.focus_areas or []) if profile is not None else []

    # Issues

    def report_issue(
        self,
        actor,
        *,
        title,
        description,
        category,
        location="",
        latitude=None,
        longitude=None,
        image_url="",
    ):
        if not location and latitude is not None and longitude is not None:
            location = Issue.coordinates_location(latitude, longitude)
        issue = self.store.create(
            "issues",
            title=title,
            description=description,
            category=category,
            location=location,
            latitude=latitude,
            longitude=longitude,
            image_url=image_url or "",
            reporter_id=actor.actor_id,
            reporter_name=actor.display_name or "Anonymous",
            status=Issue.Status.PENDING,
        )
        logger.info("Issue %s reported by %s in category %s", issue.pk, actor.actor_id, category)
        return issue

    def issues_for_reviewer(self, actor, statuses=None):
        self._require_role(actor, {Role.NGO}, "review issues")
        return matching.visible_issues(
            self.store,
            self._focus_areas(actor),
            statuses=statuses or matching.ACTIONABLE_ISSUE_STATUSES,
            batch_size=self.filter_in_limit,
            limit=self.reviewer_issue_limit,
        )

    def issues_reported_by(self, actor):
        return self.store.query(
            "issues",
            filters=[("reporter_id", "==", actor.actor_id)],
            order="-timestamp",
        )

    def transition_issue(self, actor, issue_id, target):
        issue = self._get("issues", issue_id)
        ISSUE_WORKFLOW.check(issue.status, target, actor.role)
        if not matching.eligible(self._focus_areas(actor), issue.category):
            raise Forbidden(f"Issues in '{issue.category}' are outside your focus areas.")

        issue = self.store.atomic_update(
            "issues",
            issue.pk,
            {"status": Set(target), "updated_at": ServerTimestamp()},
            precondition={"status": issue.status},
        )
        logger.info("Issue %s moved to %s by %s", issue.pk, target, actor.actor_id)
        return issue

    # Opportunities

    def create_opportunity(self, actor, *, title, category, location, date, spots, time="", description=""):
        self._require_role(actor, {Role.NGO}, "post opportunities")
        if spots < 1:
            raise ValueError("An opportunity needs at least one spot.")
        opportunity = self.store.create(
            "opportunities",
            title=title,
            description=description,
            category=category,
            location=location,
            date=date,
            time=time,
            spots=spots,
            org_id=actor.actor_id,
            org_name=actor.display_name,
            status=Opportunity.Status.OPEN,
            signed_up_volunteers=[],
        )
        logger.info("Opportunity %s posted by %s with %s spots", opportunity.pk, actor.actor_id, spots)
        return opportunity

    def open_opportunities(self, limit=None):
        return self.store.query(
            "opportunities",
            filters=[("status", "==", Opportunity.Status.OPEN)],
            order="-created_at",
            limit=limit or self.listing_limit,
        )

    def opportunities_of(self, actor):
        return self.store.query(
            "opportunities",
            filters=[("org_id", "==", actor.actor_id)],
            order="-created_at",
        )

    def sign_up(self, actor, opportunity_id):
        self._require_role(actor, HELPER_ROLES, "sign up for opportunities")
        for attempt in range(1, SIGN_UP_ATTEMPTS + 1):
            opportunity = self._get("opportunities", opportunity_id)
            plan = allocation.plan_sign_up(opportunity, actor.actor_id)
            try:
                record = self.store.atomic_update(
                    "opportunities",
                    opportunity.pk,
                    plan.changes,
                    precondition=plan.precondition,
                )
            except Conflict:
                if attempt == SIGN_UP_ATTEMPTS:
                    logger.warning("Sign up of %s to opportunity %s lost the race twice", actor.actor_id, opportunity_id)
                    raise
                logger.warning("Sign up of %s to opportunity %s conflicted; retrying", actor.actor_id, opportunity_id)
                continue
            logger.info("%s signed up for opportunity %s (status %s)", actor.actor_id, record.pk, record.status)
            return allocation.AllocationResult(plan.outcome, record)

    def cancel_sign_up(self, actor, opportunity_id):
        self._require_role(actor, HELPER_ROLES, "cancel sign ups")
        opportunity = self._get("opportunities", opportunity_id)
        plan = allocation.plan_cancel_sign_up(opportunity, actor.actor_id)
        record = self.store.atomic_update("opportunities", opportunity.pk, plan.changes)
        logger.info("%s cancelled sign up for opportunity %s", actor.actor_id, record.pk)
        return allocation.AllocationResult(plan.outcome, record)

    def close_opportunity(self, actor, opportunity_id):
        opportunity = self._get("opportunities", opportunity_id)
        OPPORTUNITY_WORKFLOW.check(opportunity.status, Opportunity.Status.CLOSED, actor.role)
        if opportunity.org_id != actor.actor_id:
            raise Forbidden("Only the organisation that posted this opportunity can close it.")
        record = self.store.atomic_update(
            "opportunities",
            opportunity.pk,
            {"status": Set(Opportunity.Status.CLOSED)},
            precondition={"status": opportunity.status},
        )
        logger.info("Opportunity %s closed by %s", record.pk, actor.actor_id)
        return record

    # Food donations

    def create_donation(
        self,
        actor,
        *,
        food_type,
        quantity,
        pickup_location,
        pickup_instructions="",
        best_before=None,
    ):
        self._require_role(actor, {Role.RESTAURANT}, "list food donations")
        donation = self.store.create(
            "food_donations",
            restaurant_id=actor.actor_id,
            restaurant_name=actor.display_name,
            food_type=food_type,
            quantity=quantity,
            pickup_location=pickup_location,
            pickup_instructions=pickup_instructions,
            best_before=best_before,
            status=FoodDonation.Status.AVAILABLE,
        )
        logger.info("Donation %s listed by %s", donation.pk, actor.actor_id)
        return donation

    def available_donations(self, limit=None):
        return self.store.query(
            "food_donations",
            filters=[("status", "==", FoodDonation.Status.AVAILABLE)],
            order="-created_at",
            limit=limit or self.listing_limit,
        )

    def donations_of(self, actor):
        return self.store.query(
            "food_donations",
            filters=[("restaurant_id", "==", actor.actor_id)],
            order="-created_at",
            limit=self.donation_history_limit,
        )

    def claim_donation(self, actor, donation_id, notes="", phone=""):
        self._require_role(actor, DONATION_WORKFLOW.roles_into(FoodDonation.Status.CLAIMED), "claim donations")
        donation = self._get("food_donations", donation_id)
        plan = allocation.plan_claim(donation, actor.actor_id, actor.display_name, notes, phone)
        try:
            record = self.store.atomic_update(
                "food_donations",
                donation.pk,
                plan.changes,
                precondition=plan.precondition,
            )
        except Conflict:
            logger.warning("Claim of donation %s by %s lost the race", donation_id, actor.actor_id)
            raise allocation.lost_claim_error(self.store.get("food_donations", donation_id)) from None
        logger.info("Donation %s claimed by %s", record.pk, actor.actor_id)
        return allocation.AllocationResult(plan.outcome, record)

    def mark_unavailable(self, actor, donation_id):
        self._require_role(
            actor,
            DONATION_WORKFLOW.roles_into(FoodDonation.Status.UNAVAILABLE),
            "withdraw donations",
        )
        donation = self._get("food_donations", donation_id)
        plan = allocation.plan_mark_unavailable(donation, actor.actor_id)
        try:
            record = self.store.atomic_update(
                "food_donations",
                donation.pk,
                plan.changes,
                precondition=plan.precondition,
            )
        except Conflict:
            raise NotAvailable() from None
        logger.info("Donation %s withdrawn by %s", record.pk, actor.actor_id)
        return allocation.AllocationResult(plan.outcome, record)

    # Food requests

    def create_food_request(self, actor, *, food_type, quantity, description=""):
        self._require_role(actor, {Role.NGO}, "request food")
        food_request = self.store.create(
            "food_requests",
            ngo_id=actor.actor_id,
            food_type=food_type,
            quantity=quantity,
            description=description,
            status=FoodRequest.Status.PENDING,
        )
        logger.info("Food request %s created by %s", food_request.pk, actor.actor_id)
        return food_request

    def pending_food_requests(self, limit=None):
        return self.store.query(
            "food_requests",
            filters=[("status", "==", FoodRequest.Status.PENDING)],
            order="-created_at",
            limit=limit or self.listing_limit,
        )

    def food_requests_of(self, actor):
        return self.store.query(
            "food_requests",
            filters=[("ngo_id", "==", actor.actor_id)],
            order="-created_at",
        )

    def decide_food_request(self, actor, request_id, decision):
        food_request = self._get("food_requests", request_id)
        FOOD_REQUEST_WORKFLOW.check(food_request.status, decision, actor.role)
        record = self.store.atomic_update(
            "food_requests",
            food_request.pk,
            {
                "status": Set(decision),
                "restaurant_id": Set(actor.actor_id),
                "restaurant_name": Set(actor.display_name or "Restaurant"),
                "updated_at": ServerTimestamp(),
            },
            precondition={"status": food_request.status},
        )
        logger.info("Food request %s %s by %s", record.pk, decision, actor.actor_id)
        return record

    # Payments and leaderboards

    def record_payment(self, actor_id, amount, session_id):
        profile = self._get("actor_profiles", actor_id)
        if not profile.is_helper:
            raise Forbidden("Only citizens and volunteers keep a donation total.")
        return leaderboard.record_payment(self.store, actor_id, amount, session_id)

    def donation_leaderboard(self):
        return leaderboard.donation_leaderboard(self.store, size=self.leaderboard_size)

    def monetary_leaderboard(self):
        return leaderboard.monetary_leaderboard(self.store, size=self.leaderboard_size)

    def approved_organizations(self):
        """Approved NGOs with enough registration details to list publicly."""
        profiles = self.store.query(
            "actor_profiles",
            filters=[
                ("role", "==", Role.NGO),
                ("verification_status", "==", ActorProfile.Verification.APPROVED),
            ],
            order="name",
        )
        return [profile for profile in profiles if profile.name and profile.description and profile.address]

    # Organisation registration

    def submit_registration(
        self,
        actor,
        *,
        org_name,
        address,
        description="",
        contact_email="",
        contact_phone="",
        website="",
        registration_number="",
        focus_areas=None,
        document_url="",
    ):
        self._require_role(actor, ORGANISATION_ROLES, "register an organisation")
        required = {"org_name": org_name, "address": address}
        if actor.role == Role.NGO:
            required.update(description=description, document_url=document_url)
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise IncompleteRegistration(f"Missing registration fields: {', '.join(missing)}.")

        profile = self._get("actor_profiles", actor.actor_id)
        current = profile.verification_status
        if current != ActorProfile.Verification.PENDING:
            VERIFICATION_WORKFLOW.check(current, ActorProfile.Verification.PENDING, actor.role)

        changes = {
            "name": Set(org_name),
            "description": Set(description),
            "address": Set(address),
            "contact_email": Set(contact_email),
            "contact_phone": Set(contact_phone),
            "website": Set(website),
            "registration_number": Set(registration_number),
            "registration_doc_url": Set(document_url),
            "verification_status": Set(ActorProfile.Verification.PENDING),
            "submitted_at": ServerTimestamp(),
        }
        if actor.role == Role.NGO and focus_areas is not None:
            changes["focus_areas"] = Set(list(dict.fromkeys(focus_areas)))

        record = self.store.atomic_update(
            "actor_profiles",
            actor.actor_id,
            changes,
            precondition={"verification_status": current},
        )
        logger.info("Registration submitted by %s (%s)", actor.actor_id, actor.role)
        return record

    def review_registration(self, actor, profile_id, decision):
        profile = self._get("actor_profiles", profile_id)
        if profile.role not in ORGANISATION_ROLES:
            raise InvalidTransition(f"Profile {profile_id} has no organisation registration to review.")
        VERIFICATION_WORKFLOW.check(profile.verification_status, decision, actor.role)
        record = self.store.atomic_update(
            "actor_profiles",
            profile.pk,
            {"verification_status": Set(decision)},
            precondition={"verification_status": profile.verification_status},
        )
        logger.info("Registration of %s %s by %s", profile_id, decision, actor.actor_id)
        return record

    # Dashboards, one per role

    def dashboard(self, actor):
        handler = self._dashboards.get(actor.role)
        if handler is None:
            raise Forbidden(f"Unknown role '{actor.role}'.")
        return handler(actor)

    def _citizen_dashboard(self, actor):
        profile = self.store.get("actor_profiles", actor.actor_id)
        return {
            "reported_issues": self.issues_reported_by(actor),
            "total_donated": profile.total_donated if profile is not None else 0,
        }

    def _volunteer_dashboard(self, actor):
        return {
            "open_opportunities": self.open_opportunities(),
            "available_donations": self.available_donations(),
            "claimed_donations": self.store.query(
                "food_donations",
                filters=[("claimed_by_volunteer_id", "==", actor.actor_id)],
                order="-claimed_at",
            ),
        }

    def _ngo_dashboard(self, actor):
        try:
            issues = self.issues_for_reviewer(actor)
            focus_areas_configured = True
        except NoFocusAreasConfigured:
            issues = []
            focus_areas_configured = False
        return {
            "focus_areas_configured": focus_areas_configured,
            "visible_issues": issues,
            "opportunities": self.opportunities_of(actor),
            "food_requests": self.food_requests_of(actor),
        }

    def _restaurant_dashboard(self, actor):
        donations = self.donations_of(actor)
        return {
            "pending_food_requests": self.pending_food_requests(),
            "available_donations": [d for d in donations if d.status == FoodDonation.Status.AVAILABLE],
            "claimed_donations": [d for d in donations if d.status == FoodDonation.Status.CLAIMED],
            "unavailable_donations": [d for d in donations if d.status == FoodDonation.Status.UNAVAILABLE],
        }

    def _superadmin_dashboard(self, actor):
        return {
            "donation_leaderboard": self.donation_leaderboard(),
            "monetary_leaderboard": self.monetary_leaderboard(),
            "pending_organizations": [
                profile
                for profile in self.store.query(
                    "actor_profiles",
                    filters=[
                        ("role", "in", ORGANISATION_ROLES),
                        ("verification_status", "==", ActorProfile.Verification.PENDING),
                    ],
                    order="name",
                )
                if profile.submitted_at is not None
            ],
        }
