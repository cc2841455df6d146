"""
Account pages: sign-in, sign-out, registration, confirmation and password recovery.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import RedirectResponse

from realty.config import settings
from realty.schemas.forms import FormErrors, validate_form
from realty.schemas.auth import LoginForm, RegisterForm, ForgotPasswordForm, ResetPasswordForm
from realty.services.auth import AuthService
from realty.services.mailer import Mailer
from realty.templating import render
from realty.utils.dependencies import get_auth_service, get_mailer, verify_csrf
from realty.utils.exceptions import AuthenticationError, InvalidTokenError, ValidationError

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _message_page(request: Request, title: str, message: str, error: bool = False):
    return render(request, "auth/message.html", {"title": title, "message": message, "error": error})


@router.get("/login", summary="Sign-in form")
async def login_form(request: Request):
    return render(request, "auth/login.html", {"title": "Sign in"})


@router.post("/login", summary="Sign in", dependencies=[Depends(verify_csrf)])
async def login(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Check the credentials and set the session cookie.

    Failed attempts re-render the form with the reason.
    """
    result = validate_form(LoginForm, await request.form())
    if isinstance(result, FormErrors):
        return render(request, "auth/login.html", {"title": "Sign in"}, form_errors=result)

    form = result.value
    try:
        user = await auth_service.authenticate(form.email, form.password)
    except AuthenticationError as e:
        errors = FormErrors(errors=[{"field": "__all__", "message": e.detail}], data={"email": form.email})
        return render(request, "auth/login.html", {"title": "Sign in"}, form_errors=errors)

    response = RedirectResponse("/my-listings", status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        settings.session_cookie_name,
        auth_service.create_session(user),
        max_age=settings.session_expire_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post("/logout", summary="Sign out", dependencies=[Depends(verify_csrf)])
async def logout():
    response = RedirectResponse("/auth/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/register", summary="Registration form")
async def register_form(request: Request):
    return render(request, "auth/register.html", {"title": "Create account"})


@router.post("/register", summary="Create an account", dependencies=[Depends(verify_csrf)])
async def register(
    request: Request,
    background_tasks: BackgroundTasks,
    auth_service: AuthService = Depends(get_auth_service),
    mailer: Mailer = Depends(get_mailer)
):
    """
    Store an unconfirmed account and email its confirmation link.
    """
    result = validate_form(RegisterForm, await request.form())
    if isinstance(result, FormErrors):
        return render(request, "auth/register.html", {"title": "Create account"}, form_errors=result)

    form = result.value
    try:
        user = await auth_service.register(form)
    except ValidationError as e:
        errors = FormErrors(errors=e.field_errors, data={"name": form.name, "email": form.email})
        return render(request, "auth/register.html", {"title": "Create account"}, form_errors=errors)

    background_tasks.add_task(mailer.send_confirmation, user.name, user.email, user.token)

    return _message_page(
        request,
        "Account created",
        "We sent you a confirmation email. Open the link in it to activate your account."
    )


@router.get("/confirm/{token}", summary="Confirm an account")
async def confirm_account(
    request: Request,
    token: str,
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        await auth_service.confirm_account(token)
    except InvalidTokenError as e:
        return _message_page(request, "Account not confirmed", e.detail, error=True)

    return _message_page(request, "Account confirmed", "Your account is active. You can sign in now.")


@router.get("/forgot-password", summary="Password recovery form")
async def forgot_password_form(request: Request):
    return render(request, "auth/forgot_password.html", {"title": "Recover access"})


@router.post("/forgot-password", summary="Send a password reset link", dependencies=[Depends(verify_csrf)])
async def forgot_password(
    request: Request,
    background_tasks: BackgroundTasks,
    auth_service: AuthService = Depends(get_auth_service),
    mailer: Mailer = Depends(get_mailer)
):
    result = validate_form(ForgotPasswordForm, await request.form())
    if isinstance(result, FormErrors):
        return render(request, "auth/forgot_password.html", {"title": "Recover access"}, form_errors=result)

    try:
        user = await auth_service.request_password_reset(result.value.email)
    except ValidationError as e:
        errors = FormErrors(errors=e.field_errors, data={"email": result.value.email})
        return render(request, "auth/forgot_password.html", {"title": "Recover access"}, form_errors=errors)

    background_tasks.add_task(mailer.send_password_reset, user.name, user.email, user.token)

    return _message_page(request, "Check your email", "We sent you a link to choose a new password.")


@router.get("/reset-password/{token}", summary="New password form")
async def reset_password_form(
    request: Request,
    token: str,
    auth_service: AuthService = Depends(get_auth_service)
):
    try:
        await auth_service.check_reset_token(token)
    except InvalidTokenError as e:
        return _message_page(request, "Password not reset", e.detail, error=True)

    return render(request, "auth/reset_password.html", {"title": "Choose a new password", "token": token})


@router.post("/reset-password/{token}", summary="Save a new password", dependencies=[Depends(verify_csrf)])
async def reset_password(
    request: Request,
    token: str,
    auth_service: AuthService = Depends(get_auth_service)
):
    context = {"title": "Choose a new password", "token": token}

    result = validate_form(ResetPasswordForm, await request.form())
    if isinstance(result, FormErrors):
        return render(request, "auth/reset_password.html", context, form_errors=result)

    try:
        await auth_service.reset_password(token, result.value)
    except InvalidTokenError as e:
        return _message_page(request, "Password not reset", e.detail, error=True)

    return _message_page(request, "Password saved", "Your new password was saved. You can sign in now.")
