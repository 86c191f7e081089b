"""Login response model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LoginResponse(BaseModel):
    """Body returned by the login endpoint.

    Parameters
    ----------
    token : str
        Bearer token for subsequent requests.
    raw : dict
        Full response for access to additional fields.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    token: str
    raw: dict[str, Any] = Field(default_factory=dict)
