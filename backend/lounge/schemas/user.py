import re

from pydantic import BaseModel, field_validator

from lounge.config import settings

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_]+$")


class RegisterRequest(BaseModel):
    username: str

    @field_validator("username", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("username")
    @classmethod
    def username_rules(cls, v: str) -> str:
        if not v:
            raise ValueError("Please enter a username")
        if len(v) < settings.USERNAME_MIN_LENGTH:
            raise ValueError(f"Username must be at least {settings.USERNAME_MIN_LENGTH} characters")
        if len(v) > settings.USERNAME_MAX_LENGTH:
            raise ValueError(f"Username must be at most {settings.USERNAME_MAX_LENGTH} characters")
        if not _USERNAME_RE.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        # Case is preserved: names are compared exactly
        return v
