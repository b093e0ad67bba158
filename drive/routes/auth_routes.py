"""Landing page, sign-up and login routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from common.constants import SESSION_USER_KEY
from drive.auth import get_current_user, log_in, log_out
from drive.repositories.user_repository import User
from drive.schemas.auth import LoginForm, SignUpForm
from drive.services.auth_service import AuthService
from drive.templating import templates

router = APIRouter(tags=["Authentication"])


@router.get("/", response_class=HTMLResponse)
def index(request: Request):
    """
    Landing page with the login form.
    """
    logged_in = bool(request.session.get(SESSION_USER_KEY))
    return templates.TemplateResponse(request, "index.html", {"logged_in": logged_in})


@router.get("/sign-up", response_class=HTMLResponse)
def sign_up_form(request: Request):
    return templates.TemplateResponse(request, "sign_up.html", {})


@router.post("/sign-up")
def sign_up(form: Annotated[SignUpForm, Form()]):
    """
    Register a new user account.

    Raises:
        - 400: Username already taken, or empty username/password
    """
    AuthService().register_user(form.username, form.password)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/login")
def login(request: Request, form: Annotated[LoginForm, Form()]):
    """
    Authenticate and start a session. Any failure sends the browser back to /.
    """
    user = AuthService().authenticate(form.username, form.password)
    if user is None:
        return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)

    log_in(request, user)
    return RedirectResponse(url="/after-login", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
def logout(request: Request):
    log_out(request)
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/after-login")
def after_login(current_user: User = Depends(get_current_user)):
    return RedirectResponse(url="/drive", status_code=status.HTTP_303_SEE_OTHER)
