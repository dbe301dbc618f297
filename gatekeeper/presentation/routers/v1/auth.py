from typing import Annotated, Callable

from fastapi import APIRouter, Depends, status

from gatekeeper.application.activate_user import activate_user, resend_activation
from gatekeeper.application.login_user import login_user, logout_user
from gatekeeper.application.password_reset import (
    forgot_password,
    reset_password,
    verify_reset_code,
)
from gatekeeper.application.register_user import register_user
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.token_stores import ResetTokenStorePort, SessionStorePort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext
from gatekeeper.presentation.dependencies import (
    get_activation_code_ttl_seconds,
    get_bearer_token,
    get_client_ip,
    get_code_generator,
    get_email_enabled,
    get_gettext,
    get_hash_password,
    get_mailer,
    get_rate_limiter,
    get_reset_code_ttl_seconds,
    get_reset_tokens,
    get_sessions,
    get_uow,
    get_verify_password,
)
from gatekeeper.schemas.requests import (
    EmailIn,
    LoginIn,
    RegisterIn,
    ResetPasswordIn,
    VerifyActivationIn,
    VerifyResetCodeIn,
)
from gatekeeper.schemas.responses import ApiResponse

router = APIRouter(prefix="/auth", tags=["Auth"])

Uow = Annotated[UnitOfWorkPort, Depends(get_uow)]
Limiter = Annotated[RateLimiter, Depends(get_rate_limiter)]
Codes = Annotated[CodeGenerator, Depends(get_code_generator)]
Mailer = Annotated[MailerPort, Depends(get_mailer)]
ClientIp = Annotated[str, Depends(get_client_ip)]
Translate = Annotated[Gettext, Depends(get_gettext)]


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def post_register(
    body: RegisterIn,
    uow: Uow,
    rate_limiter: Limiter,
    codes: Codes,
    mailer: Mailer,
    client_ip: ClientIp,
    gettext: Translate,
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
    code_ttl_seconds: Annotated[int, Depends(get_activation_code_ttl_seconds)],
):
    user = await register_user(
        uow=uow,
        rate_limiter=rate_limiter,
        codes=codes,
        mailer=mailer,
        client_ip=client_ip,
        username=body.username,
        email=body.email,
        password=body.password,
        password_confirm=body.password_confirm,
        first_name=body.first_name,
        last_name=body.last_name,
        hash_password=hash_password,
        code_ttl_seconds=code_ttl_seconds,
        gettext=gettext,
    )
    return ApiResponse(
        message=gettext(
            "Registration successful. Check your email for the activation code."
        ),
        data={"email": user.email, "requires_activation": True},
    )


@router.post("/verify-activation", response_model=ApiResponse)
async def post_verify_activation(
    body: VerifyActivationIn,
    uow: Uow,
    rate_limiter: Limiter,
    codes: Codes,
    mailer: Mailer,
    client_ip: ClientIp,
    gettext: Translate,
    email_enabled: Annotated[bool, Depends(get_email_enabled)],
):
    await activate_user(
        uow=uow,
        rate_limiter=rate_limiter,
        codes=codes,
        mailer=mailer,
        client_ip=client_ip,
        email=body.email,
        code=body.code,
        email_enabled=email_enabled,
        gettext=gettext,
    )
    return ApiResponse(message=gettext("Account activated. You can now log in."))


@router.post("/resend-activation", response_model=ApiResponse)
async def post_resend_activation(
    body: EmailIn,
    uow: Uow,
    rate_limiter: Limiter,
    codes: Codes,
    mailer: Mailer,
    gettext: Translate,
    code_ttl_seconds: Annotated[int, Depends(get_activation_code_ttl_seconds)],
):
    message = await resend_activation(
        uow=uow,
        rate_limiter=rate_limiter,
        codes=codes,
        mailer=mailer,
        email=body.email,
        code_ttl_seconds=code_ttl_seconds,
        gettext=gettext,
    )
    return ApiResponse(message=gettext(message))


@router.post("/login", response_model=ApiResponse)
async def post_login(
    body: LoginIn,
    uow: Uow,
    rate_limiter: Limiter,
    codes: Codes,
    mailer: Mailer,
    client_ip: ClientIp,
    gettext: Translate,
    sessions: Annotated[SessionStorePort, Depends(get_sessions)],
    verify_password: Annotated[Callable[[str, str], bool], Depends(get_verify_password)],
    email_enabled: Annotated[bool, Depends(get_email_enabled)],
    code_ttl_seconds: Annotated[int, Depends(get_activation_code_ttl_seconds)],
):
    result = await login_user(
        uow=uow,
        rate_limiter=rate_limiter,
        codes=codes,
        mailer=mailer,
        sessions=sessions,
        client_ip=client_ip,
        username_or_email=body.username_or_email,
        password=body.password,
        verify_password=verify_password,
        email_enabled=email_enabled,
        code_ttl_seconds=code_ttl_seconds,
        gettext=gettext,
    )
    return ApiResponse(
        message=gettext("Login successful."),
        data={"token": result.token, "display_name": result.display_name},
    )


@router.post("/logout", response_model=ApiResponse)
async def post_logout(
    gettext: Translate,
    token: Annotated[str, Depends(get_bearer_token)],
    sessions: Annotated[SessionStorePort, Depends(get_sessions)],
):
    await logout_user(sessions, token)
    return ApiResponse(message=gettext("Logged out."))


@router.post("/forgot-password", response_model=ApiResponse)
async def post_forgot_password(
    body: EmailIn,
    uow: Uow,
    rate_limiter: Limiter,
    codes: Codes,
    mailer: Mailer,
    gettext: Translate,
    code_ttl_seconds: Annotated[int, Depends(get_reset_code_ttl_seconds)],
):
    message = await forgot_password(
        uow=uow,
        rate_limiter=rate_limiter,
        codes=codes,
        mailer=mailer,
        email=body.email,
        code_ttl_seconds=code_ttl_seconds,
        gettext=gettext,
    )
    return ApiResponse(message=gettext(message))


@router.post("/verify-reset-code", response_model=ApiResponse)
async def post_verify_reset_code(
    body: VerifyResetCodeIn,
    rate_limiter: Limiter,
    codes: Codes,
    client_ip: ClientIp,
    gettext: Translate,
    reset_tokens: Annotated[ResetTokenStorePort, Depends(get_reset_tokens)],
):
    token = await verify_reset_code(
        rate_limiter=rate_limiter,
        codes=codes,
        reset_tokens=reset_tokens,
        client_ip=client_ip,
        email=body.email,
        code=body.code,
    )
    return ApiResponse(
        message=gettext("Code verified. You can now choose a new password."),
        data={"reset_token": token},
    )


@router.post("/reset-password", response_model=ApiResponse)
async def post_reset_password(
    body: ResetPasswordIn,
    uow: Uow,
    codes: Codes,
    mailer: Mailer,
    gettext: Translate,
    reset_tokens: Annotated[ResetTokenStorePort, Depends(get_reset_tokens)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
    verify_password: Annotated[Callable[[str, str], bool], Depends(get_verify_password)],
    email_enabled: Annotated[bool, Depends(get_email_enabled)],
):
    await reset_password(
        uow=uow,
        codes=codes,
        mailer=mailer,
        reset_tokens=reset_tokens,
        reset_token=body.reset_token,
        new_password=body.new_password,
        new_password_confirm=body.new_password_confirm,
        hash_password=hash_password,
        verify_password=verify_password,
        email_enabled=email_enabled,
        gettext=gettext,
    )
    return ApiResponse(message=gettext("Password reset. You can now log in."))
