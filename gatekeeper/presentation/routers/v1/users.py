from typing import Annotated, Callable

from fastapi import APIRouter, Depends

from gatekeeper.application.profile import change_password, get_profile, update_profile
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.entities import Session
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.i18n import Gettext
from gatekeeper.presentation.dependencies import (
    get_code_generator,
    get_current_session,
    get_gettext,
    get_hash_password,
    get_mailer,
    get_uow,
    get_verify_password,
)
from gatekeeper.schemas.requests import ChangePasswordIn, ProfileUpdateIn
from gatekeeper.schemas.responses import ApiResponse, ProfileOut

router = APIRouter(prefix="/users", tags=["Users"])

CurrentSession = Annotated[Session, Depends(get_current_session)]


@router.get("/me", response_model=ApiResponse)
async def get_me(
    session: CurrentSession,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
):
    user = await get_profile(uow, session.user_id)
    return ApiResponse(data=ProfileOut.from_user(user).model_dump())


@router.patch("/me", response_model=ApiResponse)
async def patch_me(
    body: ProfileUpdateIn,
    session: CurrentSession,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    gettext: Annotated[Gettext, Depends(get_gettext)],
):
    user = await update_profile(uow, session.user_id, body.first_name, body.last_name)
    return ApiResponse(
        message=gettext("Profile updated."),
        data=ProfileOut.from_user(user).model_dump(),
    )


@router.post("/me/password", response_model=ApiResponse)
async def post_change_password(
    body: ChangePasswordIn,
    session: CurrentSession,
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    codes: Annotated[CodeGenerator, Depends(get_code_generator)],
    mailer: Annotated[MailerPort, Depends(get_mailer)],
    gettext: Annotated[Gettext, Depends(get_gettext)],
    hash_password: Annotated[Callable[..., str], Depends(get_hash_password)],
    verify_password: Annotated[Callable[[str, str], bool], Depends(get_verify_password)],
):
    await change_password(
        uow=uow,
        codes=codes,
        mailer=mailer,
        user_id=session.user_id,
        current_password=body.current_password,
        new_password=body.new_password,
        new_password_confirm=body.new_password_confirm,
        hash_password=hash_password,
        verify_password=verify_password,
        gettext=gettext,
    )
    return ApiResponse(message=gettext("Password changed."))
