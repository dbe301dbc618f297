import logging
from typing import Callable

from gatekeeper.application import policies
from gatekeeper.application.notifications import deliver
from gatekeeper.domain import email_templates
from gatekeeper.domain import services as domain_services
from gatekeeper.domain.code_generator import CodeGenerator
from gatekeeper.domain.entities import User
from gatekeeper.domain.errors import UserAlreadyExists
from gatekeeper.domain.ports.mailer import MailerPort
from gatekeeper.domain.ports.unit_of_work import UnitOfWorkPort
from gatekeeper.domain.rate_limiter import RateLimiter
from gatekeeper.i18n import Gettext, passthrough

logger = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = "Too many registration attempts. Please try again in {wait}."


async def register_user(
    uow: UnitOfWorkPort,
    rate_limiter: RateLimiter,
    codes: CodeGenerator,
    mailer: MailerPort,
    client_ip: str,
    username: str,
    email: str,
    password: str,
    password_confirm: str,
    first_name: str,
    last_name: str,
    hash_password: Callable[..., str],
    code_ttl_seconds: int = 1800,
    gettext: Gettext = passthrough,
) -> User:
    await policies.ensure_not_limited(
        rate_limiter, policies.REGISTER_LIMIT, client_ip, RATE_LIMITED_MESSAGE
    )

    normalized_email = email.strip().lower()
    username = username.strip()
    domain_services.validate_names(first_name, last_name)
    domain_services.validate_username(username)
    domain_services.validate_password_strength(password)
    domain_services.validate_password_confirmation(password, password_confirm)

    async with uow as transaction:
        username_taken, email_taken = await transaction.db_users.find_taken(
            username, normalized_email
        )
        if username_taken:
            raise UserAlreadyExists("That username is already taken.")
        if email_taken:
            raise UserAlreadyExists()
        user = await transaction.db_users.create_pending(
            username=username,
            email=normalized_email,
            password_hash=hash_password(password),
            first_name=first_name.strip(),
            last_name=last_name.strip(),
        )
        await transaction.commit()

    await policies.record_attempt(rate_limiter, policies.REGISTER_LIMIT, client_ip)

    code = codes.generate_code()
    await codes.store_code(
        policies.ACTIVATION_CODE_PREFIX, normalized_email, code, code_ttl_seconds
    )
    await deliver(
        mailer,
        email_templates.activation_code(normalized_email, code, code_ttl_seconds, gettext),
    )
    logger.info("user registered", extra={"user_id": user.id})
    return user
