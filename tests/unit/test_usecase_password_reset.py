import pytest

from gatekeeper.application import policies
from gatekeeper.application.password_reset import (
    GENERIC_FORGOT_MESSAGE,
    forgot_password,
    reset_password,
    verify_reset_code,
)
from gatekeeper.domain.errors import (
    EmailFeaturesDisabled,
    InvalidResetToken,
    InvalidVerificationCode,
    PasswordMismatch,
    PasswordReused,
    RateLimited,
    WeakPassword,
)
from tests.fakes import GOOD_PASSWORD

IP = "198.51.100.4"
NEW_PASSWORD = "Fresh#456"


@pytest.fixture()
def forgot(uow, rate_limiter, codes, mailer):
    async def _forgot(email):
        return await forgot_password(
            uow=uow, rate_limiter=rate_limiter, codes=codes, mailer=mailer, email=email
        )

    return _forgot


@pytest.fixture()
def verify(rate_limiter, codes, reset_tokens):
    async def _verify(email, code):
        return await verify_reset_code(
            rate_limiter=rate_limiter,
            codes=codes,
            reset_tokens=reset_tokens,
            client_ip=IP,
            email=email,
            code=code,
        )

    return _verify


@pytest.fixture()
def reset(uow, codes, mailer, reset_tokens, hash_password_stub, verify_password_stub):
    async def _reset(token, new=NEW_PASSWORD, confirm=None, **kwargs):
        return await reset_password(
            uow=uow,
            codes=codes,
            mailer=mailer,
            reset_tokens=reset_tokens,
            reset_token=token,
            new_password=new,
            new_password_confirm=new if confirm is None else confirm,
            hash_password=hash_password_stub,
            verify_password=verify_password_stub,
            **kwargs,
        )

    return _reset


@pytest.mark.asyncio
async def test_full_reset_flow(
    forgot, verify, reset, repo, codes, mailer, reset_tokens, active_user, fixed_code
):
    assert await forgot("Alice@Example.com") == GENERIC_FORGOT_MESSAGE
    assert fixed_code in mailer.sent[-1].body

    token = await verify(active_user.email, fixed_code)
    assert await reset_tokens.get_email(token) == active_user.email
    # the code was traded for the token
    assert not await codes.verify_code(policies.RESET_CODE_PREFIX, active_user.email, fixed_code)

    await reset(token)

    assert repo.hashes[active_user.id] == "hashed-" + NEW_PASSWORD
    assert await reset_tokens.get_email(token) is None
    assert mailer.sent[-1].subject == "Password Reset Successful"


@pytest.mark.asyncio
async def test_forgot_is_silent_for_unknown_email(forgot, mailer):
    assert await forgot("ghost@example.com") == GENERIC_FORGOT_MESSAGE
    assert mailer.sent == []


@pytest.mark.asyncio
async def test_forgot_is_limited_per_email(forgot, mailer, active_user):
    for _ in range(policies.FORGOT_PASSWORD_LIMIT.max_attempts + 3):
        assert await forgot(active_user.email) == GENERIC_FORGOT_MESSAGE
    assert len(mailer.sent) == policies.FORGOT_PASSWORD_LIMIT.max_attempts


@pytest.mark.asyncio
async def test_wrong_reset_code_counts_against_ip(verify, codes, active_user):
    await codes.store_code(policies.RESET_CODE_PREFIX, active_user.email, "222222", 900)

    for _ in range(policies.VERIFY_RESET_LIMIT.max_attempts):
        with pytest.raises(InvalidVerificationCode):
            await verify(active_user.email, "999999")
    with pytest.raises(RateLimited):
        await verify(active_user.email, "222222")


@pytest.mark.asyncio
async def test_reset_requires_live_token(reset):
    with pytest.raises(InvalidResetToken):
        await reset("not-a-token")


@pytest.mark.asyncio
async def test_reset_requires_email_features(reset):
    with pytest.raises(EmailFeaturesDisabled):
        await reset("whatever", email_enabled=False)


@pytest.mark.asyncio
async def test_reset_rejects_current_password(reset, reset_tokens, repo, active_user):
    token = await reset_tokens.issue(active_user.email)
    with pytest.raises(PasswordReused):
        await reset(token, GOOD_PASSWORD)
    # token survives so the user can try another password
    assert await reset_tokens.get_email(token) == active_user.email
    assert repo.hashes[active_user.id] == "hashed-" + GOOD_PASSWORD


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "new, confirm, error",
    [("short", "short", WeakPassword), (NEW_PASSWORD, "Other#456", PasswordMismatch)],
)
async def test_reset_validates_new_password(
    reset, reset_tokens, active_user, new, confirm, error
):
    token = await reset_tokens.issue(active_user.email)
    with pytest.raises(error):
        await reset(token, new, confirm)


@pytest.mark.asyncio
async def test_reset_discards_any_pending_reset_code(reset, reset_tokens, codes, active_user):
    await codes.store_code(policies.RESET_CODE_PREFIX, active_user.email, "333333", 900)
    token = await reset_tokens.issue(active_user.email)

    await reset(token)

    assert not await codes.verify_code(policies.RESET_CODE_PREFIX, active_user.email, "333333")
