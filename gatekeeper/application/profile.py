import logging
from typing import Callable

from gatekeeper.application import policies
from gatekeeper.application.notifications import deliver
from gatekeeper.domain import email_templates
from gatekeeper.domain import services as domain_services
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.entities import User
from gatekeeper.domain.errors import IncorrectPassword, UserNotFound, WeakPassword
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)


async def get_profile(uow: UnitOfWorkPort, user_id: str) -> User:
    async with uow as transaction:
        user = await transaction.db_users.get_by_id(user_id)
    if not user:
        raise UserNotFound()
    return user


async def update_profile(
    uow: UnitOfWorkPort, user_id: str, first_name: str, last_name: str
) -> User:
    domain_services.validate_names(first_name, last_name)

    async with uow as transaction:
        user = await transaction.db_users.get_by_id(user_id)
        if not user:
            raise UserNotFound()
        user.first_name, user.last_name = first_name.strip(), last_name.strip()
        await transaction.db_users.update_names(user.id, user.first_name, user.last_name)
        await transaction.commit()
    return user


async def change_password(
    uow: UnitOfWorkPort,
    codes: CodeGenerator,
    mailer: MailerPort,
    user_id: str,
    current_password: str,
    new_password: str,
    new_password_confirm: str,
    hash_password: Callable[..., str],
    verify_password: Callable[[str, str], bool],
    gettext: Gettext = passthrough,
) -> None:
    async with uow as transaction:
        record = await transaction.db_users.get_by_id_with_hash(user_id)
        if not record:
            raise UserNotFound()
        user, password_hash = record

        if not verify_password(current_password, password_hash):
            logger.info("password change rejected", extra={"user_id": user_id})
            raise IncorrectPassword()
        if domain_services.secure_compare(current_password, new_password):
            raise WeakPassword(
                "New password must be different from your current password."
            )
        domain_services.validate_password_strength(new_password)
        domain_services.validate_password_confirmation(new_password, new_password_confirm)

        await transaction.db_users.set_password_hash(user.id, hash_password(new_password))
        await transaction.commit()

    # a pending reset code would otherwise still override the new password
    await codes.delete_code(policies.RESET_CODE_PREFIX, user.email)
    await deliver(mailer, email_templates.password_changed(user.email, gettext))
    logger.info("password changed", extra={"user_id": user.id})
