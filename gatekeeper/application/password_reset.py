import logging
from typing import Callable

from gatekeeper.application import policies
from gatekeeper.application.notifications import deliver
from gatekeeper.domain import email_templates
from gatekeeper.domain import services as domain_services
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.errors import (
    EmailFeaturesDisabled,
    InvalidResetToken,
    InvalidVerificationCode,
    PasswordReused,
    UserNotFound,
)
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.token_stores import ResetTokenStorePort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)

GENERIC_FORGOT_MESSAGE = "If that email is registered, a reset code has been sent."


async def forgot_password(
    uow: UnitOfWorkPort,
    rate_limiter: RateLimiter,
    codes: CodeGenerator,
    mailer: MailerPort,
    email: str,
    code_ttl_seconds: int = 900,
    gettext: Gettext = passthrough,
) -> str:
    """Email a reset code if the account exists; the answer never says whether it does."""
    normalized_email = email.strip().lower()
    limit = policies.FORGOT_PASSWORD_LIMIT

    if await rate_limiter.is_limited(limit.prefix, normalized_email, limit.max_attempts):
        logger.info("forgot password rate limited")
        return GENERIC_FORGOT_MESSAGE

    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(normalized_email)

    if record:
        await policies.record_attempt(rate_limiter, limit, normalized_email)
        code = codes.generate_code()
        await codes.store_code(
            policies.RESET_CODE_PREFIX, normalized_email, code, code_ttl_seconds
        )
        await deliver(
            mailer,
            email_templates.password_reset_code(
                normalized_email, code, code_ttl_seconds, gettext
            ),
        )
    return GENERIC_FORGOT_MESSAGE


async def verify_reset_code(
    rate_limiter: RateLimiter,
    codes: CodeGenerator,
    reset_tokens: ResetTokenStorePort,
    client_ip: str,
    email: str,
    code: str,
) -> str:
    """Trade a valid reset code for a short-lived reset token (the code is spent)."""
    await policies.ensure_not_limited(rate_limiter, policies.VERIFY_RESET_LIMIT, client_ip)

    normalized_email = email.strip().lower()
    if not await codes.verify_code(policies.RESET_CODE_PREFIX, normalized_email, code):
        logger.info("reset code rejected", extra={"client": client_ip})
        await policies.record_attempt(rate_limiter, policies.VERIFY_RESET_LIMIT, client_ip)
        raise InvalidVerificationCode("Invalid or expired reset code.")

    await codes.delete_code(policies.RESET_CODE_PREFIX, normalized_email)
    return await reset_tokens.issue(normalized_email)


async def reset_password(
    uow: UnitOfWorkPort,
    codes: CodeGenerator,
    mailer: MailerPort,
    reset_tokens: ResetTokenStorePort,
    reset_token: str,
    new_password: str,
    new_password_confirm: str,
    hash_password: Callable[..., str],
    verify_password: Callable[[str, str], bool],
    email_enabled: bool = True,
    gettext: Gettext = passthrough,
) -> None:
    if not email_enabled:
        raise EmailFeaturesDisabled()

    email = await reset_tokens.get_email(reset_token)
    if not email:
        raise InvalidResetToken()

    domain_services.validate_password_strength(new_password)
    domain_services.validate_password_confirmation(new_password, new_password_confirm)

    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(email)
        if not record:
            raise UserNotFound()
        user, password_hash = record
        if verify_password(new_password, password_hash):
            raise PasswordReused()
        await transaction.db_users.set_password_hash(user.id, hash_password(new_password))
        await transaction.commit()

    await reset_tokens.revoke(reset_token)
    await codes.delete_code(policies.RESET_CODE_PREFIX, email)
    await deliver(mailer, email_templates.password_reset_success(email, gettext))
    logger.info("password reset", extra={"user_id": user.id})
