from django.test import SimpleTestCase

from coordination.coordinator import Coordinator
from coordination.exceptions import Conflict, Forbidden, InvalidTransition
from coordination.models import ActorProfile, FoodRequest, Issue, Opportunity
from coordination.workflow import (
    DONATION_WORKFLOW,
    FOOD_REQUEST_WORKFLOW,
    HELPER_ROLES,
    ISSUE_WORKFLOW,
    OPPORTUNITY_WORKFLOW,
    VERIFICATION_WORKFLOW,
)

from .base import CoordinationTestCase, InterleavingStore

Role = ActorProfile.Role


class WorkflowTableTests(SimpleTestCase):
    def test_terminal_states_reject_every_move(self):
        with self.assertRaises(InvalidTransition):
            ISSUE_WORKFLOW.check(Issue.Status.RESOLVED, Issue.Status.PENDING, Role.NGO)
        with self.assertRaises(InvalidTransition):
            FOOD_REQUEST_WORKFLOW.check(FoodRequest.Status.ACCEPTED, FoodRequest.Status.REJECTED, Role.RESTAURANT)
        with self.assertRaises(InvalidTransition):
            OPPORTUNITY_WORKFLOW.check(Opportunity.Status.CLOSED, Opportunity.Status.OPEN, Role.NGO)

    def test_issue_may_skip_ahead(self):
        ISSUE_WORKFLOW.check(Issue.Status.PENDING, Issue.Status.RESOLVED, Role.NGO)

    def test_opportunity_table_only_covers_closing(self):
        OPPORTUNITY_WORKFLOW.check(Opportunity.Status.FULL, Opportunity.Status.CLOSED, Role.NGO)
        with self.assertRaises(InvalidTransition):
            OPPORTUNITY_WORKFLOW.check(Opportunity.Status.OPEN, Opportunity.Status.FULL, Role.VOLUNTEER)

    def test_structural_check_runs_before_role_check(self):
        with self.assertRaises(InvalidTransition):
            ISSUE_WORKFLOW.check(Issue.Status.RESOLVED, Issue.Status.IN_PROGRESS, Role.CITIZEN)
        with self.assertRaises(Forbidden):
            ISSUE_WORKFLOW.check(Issue.Status.PENDING, Issue.Status.IN_PROGRESS, Role.CITIZEN)

    def test_roles_into(self):
        self.assertEqual(DONATION_WORKFLOW.roles_into("claimed"), HELPER_ROLES)
        self.assertEqual(DONATION_WORKFLOW.roles_into("unavailable"), {Role.RESTAURANT})
        self.assertEqual(ISSUE_WORKFLOW.roles_into("pending"), frozenset())
        self.assertEqual(VERIFICATION_WORKFLOW.roles_into("approved"), {Role.SUPERADMIN})


class IssueTransitionTests(CoordinationTestCase):
    def test_resolved_issue_cannot_reopen(self):
        issue = self.create_issue(status=Issue.Status.RESOLVED)
        for actor in (self.ngo, self.citizen):
            with self.assertRaises(InvalidTransition):
                self.coordinator.transition_issue(actor, issue.pk, Issue.Status.IN_PROGRESS)
        issue.refresh_from_db()
        self.assertEqual(issue.status, Issue.Status.RESOLVED)

    def test_pending_issue_resolves_directly(self):
        issue = self.create_issue()
        updated = self.coordinator.transition_issue(self.ngo, issue.pk, Issue.Status.RESOLVED)
        self.assertEqual(updated.status, Issue.Status.RESOLVED)
        self.assertIsNotNone(updated.updated_at)

    def test_progress_then_resolve(self):
        issue = self.create_issue(category=Issue.Category.HEALTH)
        self.coordinator.transition_issue(self.ngo, issue.pk, Issue.Status.IN_PROGRESS)
        updated = self.coordinator.transition_issue(self.ngo, issue.pk, Issue.Status.RESOLVED)
        self.assertEqual(updated.status, Issue.Status.RESOLVED)

    def test_reviewer_outside_category_is_forbidden(self):
        issue = self.create_issue(category=Issue.Category.SAFETY)
        with self.assertRaises(Forbidden):
            self.coordinator.transition_issue(self.ngo, issue.pk, Issue.Status.IN_PROGRESS)

    def test_citizen_cannot_move_issue(self):
        issue = self.create_issue()
        with self.assertRaises(Forbidden):
            self.coordinator.transition_issue(self.citizen, issue.pk, Issue.Status.IN_PROGRESS)

    def test_concurrent_transition_conflicts(self):
        issue = self.create_issue()
        rival = Coordinator(self.store)
        store = InterleavingStore(lambda: rival.transition_issue(self.ngo, issue.pk, Issue.Status.RESOLVED))

        with self.assertRaises(Conflict):
            Coordinator(store).transition_issue(self.ngo, issue.pk, Issue.Status.IN_PROGRESS)

        issue.refresh_from_db()
        self.assertEqual(issue.status, Issue.Status.RESOLVED)

    def test_report_issue_with_coordinates_only(self):
        issue = self.coordinator.report_issue(
            self.citizen,
            title="Pothole",
            description="Deep pothole near the bus stop.",
            category=Issue.Category.INFRASTRUCTURE,
            latitude=12.5,
            longitude=77.25,
        )
        self.assertEqual(issue.location, "coords:12.5,77.25")
        self.assertEqual(issue.status, Issue.Status.PENDING)
        self.assertEqual(issue.reporter_id, self.citizen.actor_id)


class FoodRequestDecisionTests(CoordinationTestCase):
    def setUp(self):
        super().setUp()
        self.food_request = self.coordinator.create_food_request(
            self.ngo,
            food_type="Rice",
            quantity="40 kg",
            description="Weekly shelter supply",
        )

    def test_accept_records_restaurant(self):
        decided = self.coordinator.decide_food_request(
            self.restaurant,
            self.food_request.pk,
            FoodRequest.Status.ACCEPTED,
        )
        self.assertEqual(decided.status, FoodRequest.Status.ACCEPTED)
        self.assertEqual(decided.restaurant_id, self.restaurant.actor_id)
        self.assertEqual(decided.restaurant_name, "Spice Route")
        self.assertIsNotNone(decided.updated_at)

    def test_decision_is_final(self):
        self.coordinator.decide_food_request(self.restaurant, self.food_request.pk, FoodRequest.Status.REJECTED)
        with self.assertRaises(InvalidTransition):
            self.coordinator.decide_food_request(self.restaurant, self.food_request.pk, FoodRequest.Status.ACCEPTED)

    def test_only_restaurants_decide(self):
        with self.assertRaises(Forbidden):
            self.coordinator.decide_food_request(self.ngo, self.food_request.pk, FoodRequest.Status.ACCEPTED)

    def test_pending_listing(self):
        pending = self.coordinator.pending_food_requests()
        self.assertEqual([item.pk for item in pending], [self.food_request.pk])


class CloseOpportunityTests(CoordinationTestCase):
    def test_owner_closes(self):
        opportunity = self.create_opportunity()
        closed = self.coordinator.close_opportunity(self.ngo, opportunity.pk)
        self.assertEqual(closed.status, Opportunity.Status.CLOSED)
        self.assertNotIn(opportunity.pk, [item.pk for item in self.coordinator.open_opportunities()])

    def test_other_ngo_cannot_close(self):
        opportunity = self.create_opportunity()
        other = self.create_actor("ngo-2", Role.NGO, "Blue Sky")
        with self.assertRaises(Forbidden):
            self.coordinator.close_opportunity(other, opportunity.pk)

    def test_closed_is_terminal(self):
        opportunity = self.create_opportunity(status=Opportunity.Status.CLOSED)
        with self.assertRaises(InvalidTransition):
            self.coordinator.close_opportunity(self.ngo, opportunity.pk)

    def test_only_ngos_post_opportunities(self):
        with self.assertRaises(Forbidden):
            self.coordinator.create_opportunity(
                self.volunteer,
                title="Tutoring",
                category="education",
                location="Library",
                date="2030-01-01",
                spots=2,
            )

    def test_opportunity_needs_a_spot(self):
        with self.assertRaises(ValueError):
            self.coordinator.create_opportunity(
                self.ngo,
                title="Tutoring",
                category="education",
                location="Library",
                date="2030-01-01",
                spots=0,
            )
