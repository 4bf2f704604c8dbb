from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from coordination.coordinator import Coordinator
from coordination.identity import Actor
from coordination.models import ActorProfile, FoodDonation, Issue, Opportunity
from coordination.store import DjangoEntityStore

User = get_user_model()

DEMO_PASSWORD = "DemoPass123!"

DEMO_ACTORS = [
    {"id": "citizen-demo", "username": "citizen_user", "name": "Asha Citizen", "role": ActorProfile.Role.CITIZEN},
    {"id": "volunteer-demo", "username": "volunteer_user", "name": "Ravi Volunteer", "role": ActorProfile.Role.VOLUNTEER},
    {
        "id": "ngo-demo",
        "username": "ngo_user",
        "name": "Green Hands Trust",
        "role": ActorProfile.Role.NGO,
        "focus_areas": [Issue.Category.ENVIRONMENT, Issue.Category.HEALTH],
        "description": "Neighbourhood clean-ups and health camps.",
        "address": "14 Lake Road, Bengaluru",
        "verification_status": ActorProfile.Verification.APPROVED,
    },
    {"id": "restaurant-demo", "username": "restaurant_user", "name": "Spice Route Kitchen", "role": ActorProfile.Role.RESTAURANT},
    {"id": "admin-demo", "username": "superadmin_user", "name": "Portal Admin", "role": ActorProfile.Role.SUPERADMIN},
]


class Command(BaseCommand):
    help = "Seed the database with demo actors, issues, opportunities and donations."

    def handle(self, *args, **options):
        actors = {}
        for definition in DEMO_ACTORS:
            user, created = User.objects.get_or_create(
                username=definition["username"],
                defaults={"email": f"{definition['username']}@example.com"},
            )
            if created:
                user.set_password(DEMO_PASSWORD)
                user.save()
            profile, _ = ActorProfile.objects.get_or_create(
                id=definition["id"],
                defaults={
                    "user": user,
                    "name": definition["name"],
                    "role": definition["role"],
                    "focus_areas": definition.get("focus_areas", []),
                    "description": definition.get("description", ""),
                    "address": definition.get("address", ""),
                    "verification_status": definition.get(
                        "verification_status",
                        ActorProfile.Verification.PENDING,
                    ),
                },
            )
            actors[profile.role] = Actor.from_profile(profile)

        coordinator = Coordinator(DjangoEntityStore())
        citizen = actors[ActorProfile.Role.CITIZEN]
        ngo = actors[ActorProfile.Role.NGO]
        restaurant = actors[ActorProfile.Role.RESTAURANT]

        created_count = 0
        if not Issue.objects.filter(reporter_id=citizen.actor_id).exists():
            coordinator.report_issue(
                citizen,
                title="Overflowing Garbage Bins",
                description="Municipal bins are not being cleared regularly in Zone 2.",
                category=Issue.Category.ENVIRONMENT,
                location="Zone 2 - Main Street",
            )
            coordinator.report_issue(
                citizen,
                title="Stagnant water near clinic",
                description="Mosquito breeding ground next to the public health clinic.",
                category=Issue.Category.HEALTH,
                latitude=12.9716,
                longitude=77.5946,
            )
            created_count += 2

        if not Opportunity.objects.filter(org_id=ngo.actor_id).exists():
            coordinator.create_opportunity(
                ngo,
                title="Lake clean-up drive",
                category=Issue.Category.ENVIRONMENT,
                location="Ulsoor Lake",
                date=(timezone.now() + timedelta(days=7)).date(),
                time="08:00",
                spots=5,
                description="Gloves and bags provided.",
            )
            created_count += 1

        if not FoodDonation.objects.filter(restaurant_id=restaurant.actor_id).exists():
            coordinator.create_donation(
                restaurant,
                food_type="Vegetable biryani",
                quantity="20 meals",
                pickup_location="Spice Route Kitchen, back entrance",
                pickup_instructions="Ask for the duty manager.",
                best_before=timezone.now() + timedelta(hours=6),
            )
            created_count += 1

        self.stdout.write(self.style.SUCCESS("Seed complete."))
        self.stdout.write(
            self.style.WARNING(
                "Credentials: "
                + ", ".join(f"{definition['username']} / {DEMO_PASSWORD}" for definition in DEMO_ACTORS)
            )
        )
        self.stdout.write(self.style.SUCCESS(f"New records created: {created_count}"))
