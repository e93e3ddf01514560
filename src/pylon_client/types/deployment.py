"""
Deployment metadata returned by ``GET /deployments/{id}``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Deployment(BaseModel):
    """A deployed script and the socket endpoint for its console.

    ``workbench_url`` is short-lived: the remote issues a fresh one on every
    lookup and closes the socket on its own schedule, so it must be resolved
    again before each connection attempt.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Deployment identifier (numeric string)")
    workbench_url: str = Field(description="WebSocket URL for the console stream")
    bot_id: str | None = Field(default=None, description="Owning bot identifier")
    name: str | None = Field(default=None, description="Deployment name")
    status: int | None = Field(default=None, description="Deployment status code")

    @field_validator("id", "bot_id", mode="before")
    @classmethod
    def _coerce_snowflake(cls, value: object) -> object:
        # The API sometimes sends snowflakes as JSON numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
