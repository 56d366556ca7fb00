from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class GoogleAuthRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    auth_code: str = Field(min_length=1)


class GoogleAuthResponse(BaseModel):
    id_token: str


class Principal(BaseModel):
    email: str
