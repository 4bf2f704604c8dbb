from django.contrib import admin

from .models import ActorProfile, FoodDonation, FoodRequest, Issue, Opportunity


@admin.register(ActorProfile)
class ActorProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "role", "verification_status", "registration_number", "submitted_at", "user")
    list_filter = ("role", "verification_status")
    search_fields = ("id", "name", "user__username", "contact_email", "registration_number")
    readonly_fields = ("total_donated", "processed_payment_sessions", "registration_doc_url", "submitted_at", "created_at")


@admin.register(Issue)
class IssueAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "status", "reporter_name", "timestamp", "updated_at")
    list_filter = ("status", "category", "timestamp")
    search_fields = ("title", "location", "reporter_id", "reporter_name")
    readonly_fields = ("timestamp", "updated_at")


@admin.register(Opportunity)
class OpportunityAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "org_name", "date", "spots", "spots_left", "status", "created_at")
    list_filter = ("status", "category", "date")
    search_fields = ("title", "org_name", "location")
    readonly_fields = ("signed_up_volunteers", "created_at")


@admin.register(FoodDonation)
class FoodDonationAdmin(admin.ModelAdmin):
    list_display = ("id", "food_type", "restaurant_name", "status", "volunteer_name", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("food_type", "restaurant_name", "pickup_location", "volunteer_name")
    readonly_fields = ("created_at", "claimed_at")


@admin.register(FoodRequest)
class FoodRequestAdmin(admin.ModelAdmin):
    list_display = ("id", "food_type", "quantity", "ngo_id", "status", "restaurant_name", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("food_type", "ngo_id", "restaurant_name")
    readonly_fields = ("created_at", "updated_at")
