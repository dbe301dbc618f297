"""Plain-text bodies for the account emails."""

from __future__ import annotations

from gatekeeper.domain.entities import OutgoingEmail
from gatekeeper.i18n import Gettext, passthrough


def _minutes(ttl_seconds: int) -> int:
    return max(1, ttl_seconds // 60)


def activation_code(
    to: str, code: str, ttl_seconds: int, gettext: Gettext = passthrough
) -> OutgoingEmail:
    body = gettext(
        "Your activation code is {code}. It expires in {minutes} minutes."
    ).format(code=code, minutes=_minutes(ttl_seconds))
    return OutgoingEmail(to=to, subject=gettext("Activate Your Account"), body=body)


def activation_success(to: str, gettext: Gettext = passthrough) -> OutgoingEmail:
    return OutgoingEmail(
        to=to,
        subject=gettext("Account Activated"),
        body=gettext("Your account has been activated. You can now log in."),
    )


def password_reset_code(
    to: str, code: str, ttl_seconds: int, gettext: Gettext = passthrough
) -> OutgoingEmail:
    body = gettext(
        "Your password reset code is {code}. It expires in {minutes} minutes. "
        "If you did not ask for a reset, you can ignore this email."
    ).format(code=code, minutes=_minutes(ttl_seconds))
    return OutgoingEmail(to=to, subject=gettext("Password Reset Code"), body=body)


def password_reset_success(to: str, gettext: Gettext = passthrough) -> OutgoingEmail:
    return OutgoingEmail(
        to=to,
        subject=gettext("Password Reset Successful"),
        body=gettext("Your password has been reset. You can now log in."),
    )


def password_changed(to: str, gettext: Gettext = passthrough) -> OutgoingEmail:
    return OutgoingEmail(
        to=to,
        subject=gettext("Password Changed"),
        body=gettext(
            "The password for your account was changed from your profile. "
            "If this was not you, reset your password immediately."
        ),
    )
