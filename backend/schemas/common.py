from pydantic import AliasChoices, BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional


# Base for API payloads: snake_case in Python, camelCase on the wire
class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# Geographic position of an incident or request; "lat"/"lng" are accepted as input too
class Location(CamelModel):
    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"), ge=-90, le=90)
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng"), ge=-180, le=180)
    address: Optional[str] = None


# Minimal user reference embedded in reports and help requests
class UserSummary(CamelModel):
    id: int
    username: str
    role: str


def user_summary(user) -> Optional[UserSummary]:
    return UserSummary.model_validate(user) if user is not None else None
