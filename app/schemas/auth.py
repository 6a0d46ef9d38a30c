"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OtpRequest(BaseModel):
    """Credentials for the first login step."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class OtpRequestResponse(BaseModel):
    """OTP was emailed; echo requestId back on verify."""

    message: str = "OTP sent successfully"
    email: str = Field(..., description="Masked destination address")
    requestId: str = Field(..., description="Opaque identifier for the verify step")


class OtpVerifyRequest(BaseModel):
    """Second login step: the emailed code."""

    model_config = ConfigDict(extra="forbid")

    requestId: str = Field(..., min_length=1, max_length=64)
    otp: str = Field(..., min_length=1, max_length=16)

    @field_validator("otp", mode="before")
    @classmethod
    def otp_number_to_string(cls, v: object) -> object:
        # Clients may send the code as a JSON number.
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class TokenResponse(BaseModel):
    """Session token returned after a successful OTP verification."""

    message: str = "Login successful"
    token: str = Field(..., description="Signed session token (also set as adminToken cookie)")


class MessageResponse(BaseModel):
    message: str


class AuthStatusResponse(BaseModel):
    authenticated: bool = True
    username: str


class CurrentUser(BaseModel):
    """Authenticated admin (id, username, admin flag) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    is_admin: bool
