import logging

from gatekeeper.application import policies
from gatekeeper.application.notifications import deliver
from gatekeeper.domain import email_templates
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.errors import (
    EmailFeaturesDisabled,
    InvalidVerificationCode,
    UserNotFound,
)
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)

GENERIC_RESEND_MESSAGE = (
    "If that email is registered, a new activation code has been sent."
)


async def activate_user(
    uow: UnitOfWorkPort,
    rate_limiter: RateLimiter,
    codes: CodeGenerator,
    mailer: MailerPort,
    client_ip: str,
    email: str,
    code: str,
    email_enabled: bool = True,
    gettext: Gettext = passthrough,
) -> None:
    if not email_enabled:
        raise EmailFeaturesDisabled()

    await policies.ensure_not_limited(
        rate_limiter, policies.VERIFY_ACTIVATION_LIMIT, client_ip
    )

    normalized_email = email.strip().lower()
    if not await codes.verify_code(
        policies.ACTIVATION_CODE_PREFIX, normalized_email, code
    ):
        logger.info("activation code rejected", extra={"client": client_ip})
        await policies.record_attempt(
            rate_limiter, policies.VERIFY_ACTIVATION_LIMIT, client_ip
        )
        raise InvalidVerificationCode("Invalid or expired activation code.")

    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(normalized_email)
        if not record:
            raise UserNotFound()
        user, _ = record
        if not user.is_active:
            user.activate()
            await transaction.db_users.set_active(user.id)
        await transaction.commit()

    await codes.delete_code(policies.ACTIVATION_CODE_PREFIX, normalized_email)
    await deliver(mailer, email_templates.activation_success(normalized_email, gettext))
    logger.info("user activated", extra={"user_id": user.id})


async def resend_activation(
    uow: UnitOfWorkPort,
    rate_limiter: RateLimiter,
    codes: CodeGenerator,
    mailer: MailerPort,
    email: str,
    code_ttl_seconds: int = 1800,
    gettext: Gettext = passthrough,
) -> str:
    """
    Issue a fresh activation code for a pending account. Always returns the
    same generic message so the endpoint cannot be used to enumerate accounts.
    """
    normalized_email = email.strip().lower()
    limit = policies.RESEND_ACTIVATION_LIMIT

    if await rate_limiter.is_limited(limit.prefix, normalized_email, limit.max_attempts):
        logger.info("resend activation rate limited")
        return GENERIC_RESEND_MESSAGE

    async with uow as transaction:
        record = await transaction.db_users.get_by_email_with_hash(normalized_email)

    if record and not record[0].is_active:
        await policies.record_attempt(rate_limiter, limit, normalized_email)
        code = codes.generate_code()
        await codes.store_code(
            policies.ACTIVATION_CODE_PREFIX, normalized_email, code, code_ttl_seconds
        )
        await deliver(
            mailer,
            email_templates.activation_code(
                normalized_email, code, code_ttl_seconds, gettext
            ),
        )
    return GENERIC_RESEND_MESSAGE
