from pydantic import BaseModel, field_validator


class Identity(BaseModel):
    id: str
    email: str


class AuthSession(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: Identity


class SignInRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _strip_email(cls, v: str) -> str:
        return (v or "").strip()


class SignUpRequest(SignInRequest):
    # Emptiness is checked by the session controller so the fixed message is surfaced.
    username: str = ""
