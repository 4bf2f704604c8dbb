import threading
from datetime import date, timedelta

from django.db import connection
from django.test import TransactionTestCase

from coordination.coordinator import Coordinator
from coordination.exceptions import AlreadyClaimed, CoordinationError, Full
from coordination.identity import Actor
from coordination.models import ActorProfile, FoodDonation, Opportunity
from coordination.store import DjangoEntityStore


class RendezvousStore(DjangoEntityStore):
    """Store whose first read of ``collection`` waits for the other racers.

    Every racer has read the same state before any of them writes.
    """

    def __init__(self, barrier, collection):
        super().__init__()
        self.barrier = barrier
        self.collection = collection
        self.waited = False

    def get(self, collection, pk):
        record = super().get(collection, pk)
        if collection == self.collection and not self.waited:
            self.waited = True
            self.barrier.wait()
        return record


class ConcurrentAllocationTests(TransactionTestCase):
    def setUp(self):
        if connection.vendor == "sqlite" and connection.is_in_memory_db():
            self.skipTest("Threads need a file-backed SQLite test database.")
        self.racers = [
            Actor.from_profile(
                ActorProfile.objects.create(id=f"volunteer-{index}", role=ActorProfile.Role.VOLUNTEER, name=name)
            )
            for index, name in enumerate(["Ravi", "Meera"], start=1)
        ]

    def race(self, collection, operation):
        barrier = threading.Barrier(len(self.racers), timeout=10)
        outcomes = {}

        def run(actor):
            try:
                outcomes[actor.actor_id] = operation(Coordinator(RendezvousStore(barrier, collection)), actor)
            except Exception as error:
                outcomes[actor.actor_id] = error
            finally:
                connection.close()

        threads = [threading.Thread(target=run, args=(actor,)) for actor in self.racers]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return outcomes

    def split(self, outcomes):
        failures = [value for value in outcomes.values() if isinstance(value, Exception)]
        successes = [value for value in outcomes.values() if not isinstance(value, Exception)]
        return successes, failures

    def test_last_seat_has_one_winner(self):
        opportunity = Opportunity.objects.create(
            title="Food drive",
            category="social",
            location="Community hall",
            date=date.today() + timedelta(days=2),
            spots=1,
            org_id="ngo-1",
        )

        outcomes = self.race("opportunities", lambda coordinator, actor: coordinator.sign_up(actor, opportunity.pk))
        successes, failures = self.split(outcomes)

        self.assertEqual(len(successes), 1)
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], CoordinationError)
        self.assertIsInstance(failures[0], Full)

        opportunity.refresh_from_db()
        self.assertEqual(len(opportunity.signed_up_volunteers), 1)
        self.assertEqual(opportunity.status, Opportunity.Status.FULL)

    def test_donation_has_one_claimant(self):
        donation = FoodDonation.objects.create(
            restaurant_id="restaurant-1",
            food_type="Chapati",
            quantity="50",
            pickup_location="Gate 3",
        )

        outcomes = self.race(
            "food_donations",
            lambda coordinator, actor: coordinator.claim_donation(actor, donation.pk),
        )
        successes, failures = self.split(outcomes)

        self.assertEqual(len(successes), 1)
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], AlreadyClaimed)

        donation.refresh_from_db()
        self.assertEqual(donation.status, FoodDonation.Status.CLAIMED)
        self.assertEqual(donation.claimed_by_volunteer_id, successes[0].record.claimed_by_volunteer_id)
