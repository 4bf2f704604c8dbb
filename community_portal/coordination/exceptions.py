class CoordinationError(Exception):
    """Base class for every rule violation raised by the coordination core.

    Each subclass carries a stable ``code`` so that callers (the JSON views,
    management commands) can report the failure without matching on types.
    """

    code = "coordination_error"
    default_message = "The operation could not be completed."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Forbidden(CoordinationError):
    code = "forbidden"
    default_message = "You are not allowed to perform this action."


class InvalidTransition(CoordinationError):
    code = "invalid_transition"
    default_message = "This status change is not allowed."


class NotFound(CoordinationError):
    code = "not_found"
    default_message = "The requested record does not exist."


class Conflict(CoordinationError):
    code = "conflict"
    default_message = "The record was changed by someone else. Please try again."


class AlreadySignedUp(CoordinationError):
    code = "already_signed_up"
    default_message = "You are already signed up for this opportunity."


class NotSignedUp(CoordinationError):
    code = "not_signed_up"
    default_message = "You are not signed up for this opportunity."


class Full(CoordinationError):
    code = "full"
    default_message = "This opportunity has no spots left."


class NotOpen(CoordinationError):
    code = "not_open"
    default_message = "This opportunity is not open for sign ups."


class AlreadyClaimed(CoordinationError):
    code = "already_claimed"
    default_message = "This donation has already been claimed."


class NotAvailable(CoordinationError):
    code = "not_available"
    default_message = "This donation is no longer available."


class NotOwner(CoordinationError):
    code = "not_owner"
    default_message = "Only the restaurant that listed this donation can change it."


class NoFocusAreasConfigured(CoordinationError):
    code = "no_focus_areas"
    default_message = "No focus areas configured. Add focus areas to your profile to see matching issues."


class InvalidPayment(CoordinationError):
    code = "invalid_payment"
    default_message = "The payment confirmation is incomplete or invalid."


class IncompleteRegistration(CoordinationError):
    code = "incomplete_registration"
    default_message = "The registration is missing required organisation details."
