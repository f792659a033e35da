"""Identity of the shopper on whose behalf a request runs."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class Identity(BaseModel):
    """Authenticated user resolved by the session boundary."""

    model_config = {"frozen": True}

    user_id: str = Field(..., min_length=1)
    email: str | None = None
    role: Literal["customer", "admin"] = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
