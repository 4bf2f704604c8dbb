from pathlib import Path

from django import forms
from django.core.exceptions import ValidationError

from .models import ActorProfile, FoodDonation, FoodRequest, Issue, Opportunity

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
ALLOWED_DOCUMENT_EXTENSIONS = ALLOWED_IMAGE_EXTENSIONS | {".pdf"}
MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024


def validate_image(file_obj):
    extension = Path(file_obj.name).suffix.lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Only JPG, JPEG and PNG images are allowed.")
    if file_obj.size > MAX_IMAGE_SIZE_BYTES:
        raise ValidationError("Each image must be 5MB or smaller.")


def validate_document(file_obj):
    extension = Path(file_obj.name).suffix.lower()
    if extension not in ALLOWED_DOCUMENT_EXTENSIONS:
        raise ValidationError("Only JPG, JPEG, PNG, and PDF files are allowed.")
    if file_obj.size > MAX_IMAGE_SIZE_BYTES:
        raise ValidationError("Each file must be 5MB or smaller.")


class IssueForm(forms.ModelForm):
    image = forms.FileField(required=False, validators=[validate_image])

    class Meta:
        model = Issue
        fields = ["title", "description", "category", "location", "latitude", "longitude"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["location"].required = False

    def clean(self):
        cleaned_data = super().clean()
        location = (cleaned_data.get("location") or "").strip()
        latitude = cleaned_data.get("latitude")
        longitude = cleaned_data.get("longitude")
        if not location and (latitude is None or longitude is None):
            raise ValidationError("Please provide a location or both coordinates.")
        cleaned_data["location"] = location
        return cleaned_data


class IssueStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Issue.Status.choices)


class OpportunityForm(forms.ModelForm):
    class Meta:
        model = Opportunity
        fields = ["title", "description", "category", "location", "date", "time", "spots"]


class FoodDonationForm(forms.ModelForm):
    class Meta:
        model = FoodDonation
        fields = ["food_type", "quantity", "pickup_location", "pickup_instructions", "best_before"]


class ClaimDonationForm(forms.Form):
    notes = forms.CharField(required=False, max_length=1000)
    phone = forms.CharField(required=False, max_length=32)

    def clean_phone(self):
        phone = self.cleaned_data.get("phone", "").strip()
        digits = phone.replace("+", "").replace(" ", "").replace("-", "")
        if phone and not digits.isdigit():
            raise ValidationError("Enter a valid phone number.")
        return phone


class FoodRequestForm(forms.ModelForm):
    class Meta:
        model = FoodRequest
        fields = ["food_type", "quantity", "description"]


class FoodRequestDecisionForm(forms.Form):
    decision = forms.ChoiceField(
        choices=[
            (FoodRequest.Status.ACCEPTED, "Accept"),
            (FoodRequest.Status.REJECTED, "Reject"),
        ]
    )


class PaymentConfirmationForm(forms.Form):
    actor_id = forms.CharField(max_length=128)
    session_id = forms.CharField(max_length=255)
    amount = forms.IntegerField(min_value=1)


class RegistrationForm(forms.ModelForm):
    org_name = forms.CharField(max_length=255)
    focus_areas = forms.MultipleChoiceField(choices=Issue.Category.choices, required=False)
    document = forms.FileField(required=False, validators=[validate_document])

    class Meta:
        model = ActorProfile
        fields = [
            "description",
            "address",
            "contact_email",
            "contact_phone",
            "website",
            "registration_number",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["address"].required = True


class RegistrationReviewForm(forms.Form):
    decision = forms.ChoiceField(
        choices=[
            (ActorProfile.Verification.APPROVED, "Approve"),
            (ActorProfile.Verification.REJECTED, "Reject"),
        ]
    )
