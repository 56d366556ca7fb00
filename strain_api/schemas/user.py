from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UserRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email: str
    credential: str | None = None
