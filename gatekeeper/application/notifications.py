import logging

from gatekeeper.domain.entities import OutgoingEmail
from gatekeeper.domain.ports.mailer import MailerPort

logger = logging.getLogger(__name__)


async def deliver(mailer: MailerPort, message: OutgoingEmail) -> bool:
    """
    Send an account email. A relay failure is logged and reported as False;
    the account change that triggered the email has already been committed.
    """
    try:
        await mailer.send(message)
    except RuntimeError:
        logger.exception(
            "mail delivery failed", extra={"to": message.to, "subject": message.subject}
        )
        return False
    return True
