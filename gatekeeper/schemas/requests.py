from pydantic import BaseModel, EmailStr, Field


class RegisterIn(BaseModel):
    username: str = Field(..., description="Login name", min_length=1, max_length=60)
    email: EmailStr = Field(..., description="The email of the user", max_length=255)
    password: str = Field(..., description="The password of the user", min_length=1)
    password_confirm: str = Field(..., min_length=1)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)


class VerifyActivationIn(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)


class EmailIn(BaseModel):
    email: EmailStr


class LoginIn(BaseModel):
    username_or_email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class VerifyResetCodeIn(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)


class ResetPasswordIn(BaseModel):
    reset_token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    new_password_confirm: str = Field(..., min_length=1)


class ProfileUpdateIn(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)


class ChangePasswordIn(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
    new_password_confirm: str = Field(..., min_length=1)
