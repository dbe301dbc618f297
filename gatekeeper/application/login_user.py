import logging
from dataclasses import dataclass
from typing import Callable

from gatekeeper.application import policies
from gatekeeper.application.notifications import deliver
from gatekeeper.domain import email_templates
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.errors import AccountInactive, InvalidCredentials
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.token_stores import SessionStorePort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many login attempts. Please try again in {wait}."


@dataclass(frozen=True)
class LoginResult:
    token: str
    display_name: str


async def login_user(
    uow: UnitOfWorkPort,
    rate_limiter: RateLimiter,
    codes: CodeGenerator,
    mailer: MailerPort,
    sessions: SessionStorePort,
    client_ip: str,
    username_or_email: str,
    password: str,
    verify_password: Callable[[str, str], bool],
    email_enabled: bool = True,
    code_ttl_seconds: int = 1800,
    gettext: Gettext = passthrough,
) -> LoginResult:
    await policies.ensure_not_limited(
        rate_limiter, policies.LOGIN_LIMIT, client_ip, RATE_LIMITED_MESSAGE
    )

    login = username_or_email.strip()
    async with uow as transaction:
        if "@" in login:
            record = await transaction.db_users.get_by_email_with_hash(login.lower())
        else:
            record = await transaction.db_users.get_by_username_with_hash(login)

        if not record or not verify_password(password, record[1]):
            logger.info("login rejected", extra={"client": client_ip})
            await policies.record_attempt(rate_limiter, policies.LOGIN_LIMIT, client_ip)
            raise InvalidCredentials()

        user, _ = record
        if not user.is_active:
            if email_enabled:
                await transaction.commit()
                await _resend_activation_code(
                    codes, mailer, user.email, code_ttl_seconds, gettext
                )
                logger.info("login refused, account inactive", extra={"user_id": user.id})
                raise AccountInactive(user.email)
            # without email there is no way to activate, so trust the password
            user.activate()
            await transaction.db_users.set_active(user.id)
        await transaction.commit()

    token = await sessions.create(user.id, user.role)
    return LoginResult(token=token, display_name=user.display_name)


async def _resend_activation_code(
    codes: CodeGenerator,
    mailer: MailerPort,
    email: str,
    code_ttl_seconds: int,
    gettext: Gettext,
) -> None:
    code = codes.generate_code()
    await codes.store_code(policies.ACTIVATION_CODE_PREFIX, email, code, code_ttl_seconds)
    await deliver(
        mailer, email_templates.activation_code(email, code, code_ttl_seconds, gettext)
    )


async def logout_user(sessions: SessionStorePort, token: str) -> None:
    await sessions.revoke(token)
