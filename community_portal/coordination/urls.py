from django.urls import path

from .views import (
    DashboardView,
    DonationClaimView,
    DonationCollectionView,
    DonationWithdrawView,
    FoodRequestCollectionView,
    FoodRequestDecisionView,
    IssueCollectionView,
    IssueStatusView,
    LeaderboardView,
    OpportunityCancelView,
    OpportunityCloseView,
    OpportunityCollectionView,
    OpportunitySignUpView,
    OrganizationListView,
    PaymentConfirmationView,
    RegistrationReviewView,
    RegistrationView,
    ReviewerIssueListView,
)

app_name = "coordination"

urlpatterns = [
    path("dashboard/", DashboardView.as_view(), name="dashboard"),
    path("issues/", IssueCollectionView.as_view(), name="issue_list"),
    path("issues/review/", ReviewerIssueListView.as_view(), name="issue_review"),
    path("issues/<int:issue_id>/status/", IssueStatusView.as_view(), name="issue_status"),
    path("opportunities/", OpportunityCollectionView.as_view(), name="opportunity_list"),
    path("opportunities/<int:opportunity_id>/sign-up/", OpportunitySignUpView.as_view(), name="opportunity_sign_up"),
    path("opportunities/<int:opportunity_id>/cancel/", OpportunityCancelView.as_view(), name="opportunity_cancel"),
    path("opportunities/<int:opportunity_id>/close/", OpportunityCloseView.as_view(), name="opportunity_close"),
    path("donations/", DonationCollectionView.as_view(), name="donation_list"),
    path("donations/<int:donation_id>/claim/", DonationClaimView.as_view(), name="donation_claim"),
    path("donations/<int:donation_id>/withdraw/", DonationWithdrawView.as_view(), name="donation_withdraw"),
    path("food-requests/", FoodRequestCollectionView.as_view(), name="food_request_list"),
    path(
        "food-requests/<int:request_id>/decision/",
        FoodRequestDecisionView.as_view(),
        name="food_request_decision",
    ),
    path("payments/confirm/", PaymentConfirmationView.as_view(), name="payment_confirm"),
    path("registration/", RegistrationView.as_view(), name="registration"),
    path("registration/<str:profile_id>/review/", RegistrationReviewView.as_view(), name="registration_review"),
    path("leaderboards/", LeaderboardView.as_view(), name="leaderboards"),
    path("organizations/", OrganizationListView.as_view(), name="organization_list"),
]
