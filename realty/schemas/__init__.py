"""
Form and view schemas.
"""

from realty.schemas.forms import FormSchema, FormOk, FormErrors, validate_form
from realty.schemas.auth import LoginForm, RegisterForm, ForgotPasswordForm, ResetPasswordForm
from realty.schemas.listing import (
    ListingForm,
    MessageForm,
    SearchForm,
    SenderSummary,
    InquiryMessageView,
    ListingFeedItem,
    PublishStatusUpdate,
    ListingView,
    OwnedListingsPage,
)

__all__ = [
    "FormSchema",
    "FormOk",
    "FormErrors",
    "validate_form",
    "LoginForm",
    "RegisterForm",
    "ForgotPasswordForm",
    "ResetPasswordForm",
    "ListingForm",
    "MessageForm",
    "SearchForm",
    "SenderSummary",
    "InquiryMessageView",
    "ListingFeedItem",
    "PublishStatusUpdate",
    "ListingView",
    "OwnedListingsPage",
]
