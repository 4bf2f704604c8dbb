from unittest import mock

from django.db import DatabaseError

from coordination.coordinator import Coordinator
from coordination.exceptions import Forbidden, InvalidPayment, NotFound
from coordination.leaderboard import donation_leaderboard, monetary_leaderboard
from coordination.models import ActorProfile, FoodDonation
from coordination.store import DjangoEntityStore

from .base import CoordinationTestCase


class FailingProfileStore(DjangoEntityStore):
    def __init__(self, failing_id):
        super().__init__()
        self.failing_id = failing_id

    def get(self, collection, pk):
        if collection == "actor_profiles" and pk == self.failing_id:
            raise DatabaseError("profile lookup failed")
        return super().get(collection, pk)


class NoDonationScanStore(DjangoEntityStore):
    def query(self, collection, *args, **kwargs):
        if collection == "food_donations":
            raise AssertionError("donations must be counted in the database")
        return super().query(collection, *args, **kwargs)


class DonationLeaderboardTests(CoordinationTestCase):
    def claim_many(self, restaurant_id, count):
        for _ in range(count):
            self.create_donation(restaurant_id=restaurant_id, status=FoodDonation.Status.CLAIMED)

    def test_ranks_by_claimed_donations(self):
        other = self.create_actor("restaurant-2", ActorProfile.Role.RESTAURANT, "Dosa Corner")
        self.claim_many(self.restaurant.actor_id, 3)
        self.claim_many(other.actor_id, 1)
        self.create_donation(restaurant_id=other.actor_id)
        self.create_donation(restaurant_id=other.actor_id, status=FoodDonation.Status.UNAVAILABLE)

        entries = self.coordinator.donation_leaderboard()

        self.assertEqual([entry.id for entry in entries], [self.restaurant.actor_id, other.actor_id])
        self.assertEqual([entry.score for entry in entries], [3, 1])
        self.assertEqual(entries[0].name, "Spice Route")

    def test_missing_profile_gets_fallback_name(self):
        self.claim_many("ghost-kitchen-42", 2)
        entries = self.coordinator.donation_leaderboard()
        self.assertEqual(entries[0].name, "Restaurant (ghost...)")
        self.assertEqual(entries[0].score, 2)

    def test_failed_profile_lookup_does_not_drop_others(self):
        other = self.create_actor("restaurant-2", ActorProfile.Role.RESTAURANT, "Dosa Corner")
        self.claim_many(self.restaurant.actor_id, 2)
        self.claim_many(other.actor_id, 1)

        with self.assertLogs("coordination.leaderboard", level="ERROR"):
            entries = donation_leaderboard(FailingProfileStore(self.restaurant.actor_id))

        self.assertEqual(entries[0].name, "Restaurant (resta...)")
        self.assertEqual(entries[1].name, "Dosa Corner")

    def test_capped_to_leaderboard_size(self):
        for index in range(12):
            self.claim_many(f"r-{index:02d}", index + 1)
        entries = Coordinator(self.store, leaderboard_size=10).donation_leaderboard()
        self.assertEqual(len(entries), 10)
        self.assertEqual(entries[0].id, "r-11")
        self.assertEqual(entries[0].score, 12)

    def test_counts_without_loading_donations(self):
        self.claim_many(self.restaurant.actor_id, 4)
        entries = donation_leaderboard(NoDonationScanStore())
        self.assertEqual([(entry.id, entry.score) for entry in entries], [(self.restaurant.actor_id, 4)])

    def test_empty_without_claims(self):
        self.create_donation()
        self.assertEqual(donation_leaderboard(self.store), [])


class PaymentTests(CoordinationTestCase):
    def test_payment_counted_once_per_session(self):
        self.assertTrue(self.coordinator.record_payment(self.citizen.actor_id, 500, "cs_test_1"))
        with self.assertLogs("coordination.leaderboard", level="WARNING"):
            self.assertFalse(self.coordinator.record_payment(self.citizen.actor_id, 500, "cs_test_1"))

        profile = ActorProfile.objects.get(pk=self.citizen.actor_id)
        self.assertEqual(profile.total_donated, 500)
        self.assertEqual(profile.processed_payment_sessions, ["cs_test_1"])

    def test_distinct_sessions_accumulate(self):
        self.coordinator.record_payment(self.volunteer.actor_id, 200, "cs_a")
        self.coordinator.record_payment(self.volunteer.actor_id, 300, "cs_b")
        profile = ActorProfile.objects.get(pk=self.volunteer.actor_id)
        self.assertEqual(profile.total_donated, 500)

    def test_invalid_payments_are_rejected(self):
        for amount in (0, -10, 12.5, True, "100"):
            with self.assertRaises(InvalidPayment):
                self.coordinator.record_payment(self.citizen.actor_id, amount, "cs_bad")
        with self.assertRaises(InvalidPayment):
            self.coordinator.record_payment(self.citizen.actor_id, 100, "")

        profile = ActorProfile.objects.get(pk=self.citizen.actor_id)
        self.assertEqual(profile.total_donated, 0)

    def test_only_helpers_keep_totals(self):
        with self.assertRaises(Forbidden):
            self.coordinator.record_payment(self.restaurant.actor_id, 100, "cs_r")

    def test_unknown_actor(self):
        with self.assertRaises(NotFound):
            self.coordinator.record_payment("nobody", 100, "cs_x")

    def test_monetary_leaderboard_orders_by_total(self):
        self.coordinator.record_payment(self.citizen.actor_id, 100, "cs_1")
        self.coordinator.record_payment(self.volunteer.actor_id, 900, "cs_2")

        entries = monetary_leaderboard(self.store)

        self.assertEqual([entry.id for entry in entries], [self.volunteer.actor_id, self.citizen.actor_id])
        self.assertEqual([entry.score for entry in entries], [900, 100])
        self.assertNotIn(self.other_volunteer.actor_id, [entry.id for entry in entries])

    def test_monetary_leaderboard_falls_back_to_id(self):
        self.create_actor("anon-donor-9", ActorProfile.Role.CITIZEN, total_donated=50)
        entries = monetary_leaderboard(self.store)
        self.assertEqual(entries[0].name, "User (anon-...)")

    def test_storage_failure_propagates(self):
        store = DjangoEntityStore()
        with mock.patch.object(store, "atomic_update", side_effect=DatabaseError("down")):
            with self.assertRaises(DatabaseError):
                Coordinator(store).record_payment(self.citizen.actor_id, 100, "cs_down")


class OrganizationListingTests(CoordinationTestCase):
    def test_only_approved_ngos_listed(self):
        self.create_actor(
            "ngo-2",
            ActorProfile.Role.NGO,
            "Animal Aid",
            description="Shelter and care for strays.",
            address="3 Temple Street",
            verification_status=ActorProfile.Verification.APPROVED,
        )
        self.create_actor(
            "ngo-3",
            ActorProfile.Role.NGO,
            "Pending Org",
            description="Waiting for review.",
            address="9 Market Road",
        )
        organizations = self.coordinator.approved_organizations()
        self.assertEqual([org.id for org in organizations], ["ngo-2"])

    def test_approved_ngo_without_details_is_not_listed(self):
        self.create_actor(
            "ngo-2",
            ActorProfile.Role.NGO,
            "Animal Aid",
            verification_status=ActorProfile.Verification.APPROVED,
        )
        self.assertEqual(self.coordinator.approved_organizations(), [])
