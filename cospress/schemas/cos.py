from pydantic import BaseModel


class UploadImageResponse(BaseModel):
    url: str
    key: str
    uploaded: bool


class CosStatusResponse(BaseModel):
    configured: bool
    missing_fields: list[str]
    bucket: str
    region: str
    prefix: str
    cdn_domain: str | None = None
