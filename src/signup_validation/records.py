"""Record types validated by the sign-up pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

__all__ = ["SignUpRecord"]


class SignUpRecord(BaseModel):
    """The fields a user submits when signing up.

    Instances are frozen: rules hand back the same record (or a
    ``model_copy`` of it) and never edit it in place. Values are kept
    exactly as supplied; whitespace and case are not normalised here.

    Example:
        record = SignUpRecord(username="johndoe", email="a@b.com", password="123456")
        result = await validator.validate(record)
    """

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
    )

    username: str
    email: str
    password: str
