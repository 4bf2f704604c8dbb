from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Document(models.Model):
    """Abstract base for records the coordination core reads as documents."""

    hidden_fields = ()

    class Meta:
        abstract = True

    def as_document(self) -> dict:
        return {
            field.name: field.value_from_object(self)
            for field in self._meta.concrete_fields
            if field.name not in self.hidden_fields
        }


class ActorProfile(Document):
    class Role(models.TextChoices):
        CITIZEN = "citizen", "Citizen"
        VOLUNTEER = "volunteer", "Volunteer"
        NGO = "ngo", "NGO"
        RESTAURANT = "restaurant", "Restaurant"
        SUPERADMIN = "superadmin", "Super Admin"

    class Verification(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    hidden_fields = ("user", "processed_payment_sessions")

    id = models.CharField(max_length=128, primary_key=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="actor_profile",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=255, blank=True)
    role = models.CharField(max_length=20, choices=Role.choices)
    focus_areas = models.JSONField(default=list, blank=True)
    total_donated = models.PositiveIntegerField(default=0)
    processed_payment_sessions = models.JSONField(default=list, blank=True)
    photo_url = models.CharField(max_length=500, blank=True)
    verification_status = models.CharField(
        max_length=20,
        choices=Verification.choices,
        default=Verification.PENDING,
    )
    # Organisation details, submitted by NGOs and restaurants for review.
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=32, blank=True)
    website = models.URLField(blank=True)
    registration_number = models.CharField(max_length=100, blank=True)
    registration_doc_url = models.CharField(max_length=500, blank=True)
    submitted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name or self.id

    @property
    def is_helper(self) -> bool:
        return self.role in {self.Role.CITIZEN, self.Role.VOLUNTEER}


class Issue(Document):
    class Category(models.TextChoices):
        INFRASTRUCTURE = "infrastructure", "Infrastructure (Roads, Lights)"
        ENVIRONMENT = "environment", "Environment (Waste, Pollution)"
        SAFETY = "safety", "Safety & Security"
        HEALTH = "health", "Public Health"
        EDUCATION = "education", "Education"
        SOCIAL = "social", "Social Welfare"
        ANIMAL_WELFARE = "animal welfare", "Animal Welfare"
        OTHER = "other", "Other"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_PROGRESS = "in-progress", "In Progress"
        RESOLVED = "resolved", "Resolved"

    title = models.CharField(max_length=255)
    description = models.TextField()
    category = models.CharField(max_length=50, choices=Category.choices)
    location = models.CharField(max_length=255)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    reporter_id = models.CharField(max_length=128, db_index=True)
    reporter_name = models.CharField(max_length=255, blank=True)
    image_url = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    timestamp = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-timestamp"]

    def __str__(self):
        return self.title

    @staticmethod
    def coordinates_location(latitude: float, longitude: float) -> str:
        return f"coords:{latitude},{longitude}"


class Opportunity(Document):
    class Status(models.TextChoices):
        OPEN = "open", "Open"
        FULL = "full", "Full"
        CLOSED = "closed", "Closed"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=50)
    location = models.CharField(max_length=255)
    date = models.DateField()
    time = models.CharField(max_length=50, blank=True)
    spots = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    org_id = models.CharField(max_length=128, db_index=True)
    org_name = models.CharField(max_length=255, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.OPEN,
    )
    signed_up_volunteers = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def volunteers(self) -> frozenset:
        return frozenset(self.signed_up_volunteers or [])

    @property
    def spots_left(self) -> int:
        return max(0, self.spots - len(self.volunteers))


class FoodDonation(Document):
    class Status(models.TextChoices):
        AVAILABLE = "available", "Available"
        CLAIMED = "claimed", "Claimed"
        UNAVAILABLE = "unavailable", "Unavailable"

    restaurant_id = models.CharField(max_length=128, db_index=True)
    restaurant_name = models.CharField(max_length=255, blank=True)
    food_type = models.CharField(max_length=255)
    quantity = models.CharField(max_length=100)
    pickup_location = models.CharField(max_length=255)
    pickup_instructions = models.TextField(blank=True)
    best_before = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    claimed_by_volunteer_id = models.CharField(max_length=128, blank=True)
    volunteer_name = models.CharField(max_length=255, blank=True)
    claimed_at = models.DateTimeField(null=True, blank=True)
    volunteer_pickup_notes = models.TextField(blank=True)
    volunteer_phone_number = models.CharField(max_length=32, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.food_type} ({self.restaurant_name or self.restaurant_id})"


class FoodRequest(Document):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"

    ngo_id = models.CharField(max_length=128, db_index=True)
    food_type = models.CharField(max_length=255)
    quantity = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    restaurant_id = models.CharField(max_length=128, blank=True)
    restaurant_name = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.food_type} x {self.quantity}"
