from pydantic import BaseModel, Field


class LinkRequest(BaseModel):
    path: str = Field(min_length=1, max_length=1024)
    ttl_seconds: int = Field(gt=0)


class LinkResponse(BaseModel):
    url: str
    expires_at: int


class ValidateRequest(BaseModel):
    url: str = Field(max_length=8192)


class ValidateResponse(BaseModel):
    valid: bool
