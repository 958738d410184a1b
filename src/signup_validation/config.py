"""Configuration for the sign-up field rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = ["SignUpRuleConfig"]


class SignUpRuleConfig(BaseModel):
    """Inclusive length bounds for the sign-up fields.

    The defaults reproduce the standard sign-up policy: usernames and
    passwords must be between 5 and 255 characters, both ends inclusive.

    Raises:
        pydantic.ValidationError: If a bound is not positive or a minimum
            exceeds its maximum.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    username_min_length: int = Field(default=5, ge=1)
    username_max_length: int = Field(default=255, ge=1)
    password_min_length: int = Field(default=5, ge=1)
    password_max_length: int = Field(default=255, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> SignUpRuleConfig:
        if self.username_min_length > self.username_max_length:
            raise ValueError("username_min_length must not exceed username_max_length")
        if self.password_min_length > self.password_max_length:
            raise ValueError("password_min_length must not exceed password_max_length")
        return self
