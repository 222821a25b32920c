from pydantic import BaseModel, Field


class SignInRequest(BaseModel):
    # Plain str: a malformed email should read as "invalid credentials", not a form error
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=128)
