import hmac
import logging
from dataclasses import asdict

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .allocation import AllocationResult
from .coordinator import Coordinator
from .exceptions import CoordinationError, Forbidden, NotFound, NotOwner
from .forms import (
    ClaimDonationForm,
    FoodDonationForm,
    FoodRequestDecisionForm,
    FoodRequestForm,
    IssueForm,
    IssueStatusForm,
    OpportunityForm,
    PaymentConfirmationForm,
    RegistrationForm,
    RegistrationReviewForm,
)
from .identity import actor_from_request
from .leaderboard import LeaderboardEntry
from .models import Document
from .storage import DefaultStorageObjectStore
from .store import DjangoEntityStore

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = (
    (Forbidden, 403),
    (NotOwner, 403),
    (NotFound, 404),
)


def get_coordinator():
    return Coordinator(DjangoEntityStore())


def serialize(value):
    if isinstance(value, Document):
        return value.as_document()
    if isinstance(value, LeaderboardEntry):
        return asdict(value)
    if isinstance(value, AllocationResult):
        return {"outcome": value.outcome, "record": serialize(value.record)}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    return value


def error_response(error):
    status = 409
    for error_class, code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            status = code
            break
    return JsonResponse({"error": error.code, "detail": error.message}, status=status)


def form_error_response(*forms):
    errors = {}
    for form in forms:
        errors.update(form.errors.get_json_data())
    return JsonResponse({"error": "invalid", "fields": errors}, status=400)


class CoordinationView(LoginRequiredMixin, View):
    raise_exception = True

    def setup(self, request, *args, **kwargs):
        super().setup(request, *args, **kwargs)
        self.coordinator = get_coordinator()

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except CoordinationError as error:
            return error_response(error)

    def get_actor(self):
        return actor_from_request(self.request)


class IssueCollectionView(CoordinationView):
    def get(self, request):
        issues = self.coordinator.issues_reported_by(self.get_actor())
        return JsonResponse({"issues": serialize(issues)})

    def post(self, request):
        actor = self.get_actor()
        form = IssueForm(request.POST, request.FILES)
        if not form.is_valid():
            return form_error_response(form)

        image_url = ""
        image = form.cleaned_data.get("image")
        if image:
            image_url = DefaultStorageObjectStore(prefix="issue_images").upload(image, image.name)

        issue = self.coordinator.report_issue(
            actor,
            title=form.cleaned_data["title"],
            description=form.cleaned_data["description"],
            category=form.cleaned_data["category"],
            location=form.cleaned_data["location"],
            latitude=form.cleaned_data.get("latitude"),
            longitude=form.cleaned_data.get("longitude"),
            image_url=image_url,
        )
        return JsonResponse({"issue": serialize(issue)}, status=201)


class ReviewerIssueListView(CoordinationView):
    def get(self, request):
        statuses = request.GET.getlist("status") or None
        issues = self.coordinator.issues_for_reviewer(self.get_actor(), statuses=statuses)
        return JsonResponse({"issues": serialize(issues)})


class IssueStatusView(CoordinationView):
    def post(self, request, issue_id):
        actor = self.get_actor()
        form = IssueStatusForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        issue = self.coordinator.transition_issue(actor, issue_id, form.cleaned_data["status"])
        return JsonResponse({"issue": serialize(issue)})


class OpportunityCollectionView(CoordinationView):
    def get(self, request):
        return JsonResponse({"opportunities": serialize(self.coordinator.open_opportunities())})

    def post(self, request):
        actor = self.get_actor()
        form = OpportunityForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        opportunity = self.coordinator.create_opportunity(actor, **form.cleaned_data)
        return JsonResponse({"opportunity": serialize(opportunity)}, status=201)


class OpportunitySignUpView(CoordinationView):
    def post(self, request, opportunity_id):
        result = self.coordinator.sign_up(self.get_actor(), opportunity_id)
        return JsonResponse(serialize(result))


class OpportunityCancelView(CoordinationView):
    def post(self, request, opportunity_id):
        result = self.coordinator.cancel_sign_up(self.get_actor(), opportunity_id)
        return JsonResponse(serialize(result))


class OpportunityCloseView(CoordinationView):
    def post(self, request, opportunity_id):
        opportunity = self.coordinator.close_opportunity(self.get_actor(), opportunity_id)
        return JsonResponse({"opportunity": serialize(opportunity)})


class DonationCollectionView(CoordinationView):
    def get(self, request):
        return JsonResponse({"donations": serialize(self.coordinator.available_donations())})

    def post(self, request):
        actor = self.get_actor()
        form = FoodDonationForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        donation = self.coordinator.create_donation(actor, **form.cleaned_data)
        return JsonResponse({"donation": serialize(donation)}, status=201)


class DonationClaimView(CoordinationView):
    def post(self, request, donation_id):
        actor = self.get_actor()
        form = ClaimDonationForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        result = self.coordinator.claim_donation(
            actor,
            donation_id,
            notes=form.cleaned_data["notes"],
            phone=form.cleaned_data["phone"],
        )
        return JsonResponse(serialize(result))


class DonationWithdrawView(CoordinationView):
    def post(self, request, donation_id):
        result = self.coordinator.mark_unavailable(self.get_actor(), donation_id)
        return JsonResponse(serialize(result))


class FoodRequestCollectionView(CoordinationView):
    def get(self, request):
        return JsonResponse({"food_requests": serialize(self.coordinator.pending_food_requests())})

    def post(self, request):
        actor = self.get_actor()
        form = FoodRequestForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        food_request = self.coordinator.create_food_request(actor, **form.cleaned_data)
        return JsonResponse({"food_request": serialize(food_request)}, status=201)


class FoodRequestDecisionView(CoordinationView):
    def post(self, request, request_id):
        actor = self.get_actor()
        form = FoodRequestDecisionForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        food_request = self.coordinator.decide_food_request(actor, request_id, form.cleaned_data["decision"])
        return JsonResponse({"food_request": serialize(food_request)})


@method_decorator(csrf_exempt, name="dispatch")
class PaymentConfirmationView(View):
    """Relay endpoint for confirmed payments, authenticated by a shared secret."""

    secret_header = "HTTP_X_PAYMENT_RELAY_SECRET"

    def dispatch(self, request, *args, **kwargs):
        expected = settings.COORDINATION.get("PAYMENT_RELAY_SECRET", "")
        supplied = request.META.get(self.secret_header, "")
        if not expected or not hmac.compare_digest(supplied.encode(), expected.encode()):
            logger.warning("Rejected payment confirmation without a valid relay secret")
            return error_response(Forbidden("A valid payment relay secret is required."))
        try:
            return super().dispatch(request, *args, **kwargs)
        except CoordinationError as error:
            return error_response(error)

    def post(self, request):
        form = PaymentConfirmationForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        recorded = get_coordinator().record_payment(
            form.cleaned_data["actor_id"],
            form.cleaned_data["amount"],
            form.cleaned_data["session_id"],
        )
        return JsonResponse({"recorded": recorded})


class RegistrationView(CoordinationView):
    def post(self, request):
        actor = self.get_actor()
        form = RegistrationForm(request.POST, request.FILES)
        if not form.is_valid():
            return form_error_response(form)

        document_url = ""
        document = form.cleaned_data.get("document")
        if document:
            document_url = DefaultStorageObjectStore(prefix="registration_documents").upload(document, document.name)

        profile = self.coordinator.submit_registration(
            actor,
            org_name=form.cleaned_data["org_name"],
            address=form.cleaned_data["address"],
            description=form.cleaned_data["description"],
            contact_email=form.cleaned_data["contact_email"],
            contact_phone=form.cleaned_data["contact_phone"],
            website=form.cleaned_data["website"],
            registration_number=form.cleaned_data["registration_number"],
            focus_areas=form.cleaned_data["focus_areas"] or None,
            document_url=document_url,
        )
        return JsonResponse({"profile": serialize(profile)}, status=201)


class RegistrationReviewView(CoordinationView):
    def post(self, request, profile_id):
        actor = self.get_actor()
        form = RegistrationReviewForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        profile = self.coordinator.review_registration(actor, profile_id, form.cleaned_data["decision"])
        return JsonResponse({"profile": serialize(profile)})


class LeaderboardView(CoordinationView):
    def get(self, request):
        return JsonResponse(
            {
                "restaurants": serialize(self.coordinator.donation_leaderboard()),
                "donors": serialize(self.coordinator.monetary_leaderboard()),
            }
        )


class OrganizationListView(CoordinationView):
    def get(self, request):
        return JsonResponse({"organizations": serialize(self.coordinator.approved_organizations())})


class DashboardView(CoordinationView):
    def get(self, request):
        actor = self.get_actor()
        return JsonResponse({"role": actor.role, "dashboard": serialize(self.coordinator.dashboard(actor))})
