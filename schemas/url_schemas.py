from datetime import datetime

from pydantic import BaseModel, Field

from models.mapping import UrlMapping


class ShortenRequest(BaseModel):
    url: str = Field(..., description="The URL to shorten; https:// is assumed when no scheme is given")
    class Config:
        json_schema_extra = {
            "example": {
                "url": "www.example.com/some/long/path"
            }
        }


class UrlResponse(BaseModel):
    id: str = Field(..., description="Identifier of the short link, used for deletion")
    original_url: str = Field(..., description="The normalized original URL")
    short_url: str = Field(..., description="Full short URL to share")
    short_code: str = Field(..., description="The generated 6 character short code")
    click_count: int = Field(0, description="Number of times the short URL has been accessed")
    created_at: datetime = Field(..., description="Timestamp when the short URL was created")
    class Config:
        json_schema_extra = {
            "example": {
                "id": "3f7c1b0e9a2d4c6e8b1a5f0d2c4e6a8b",
                "original_url": "https://www.example.com/some/long/path",
                "short_url": "http://localhost:8000/aB3xY9",
                "short_code": "aB3xY9",
                "click_count": 42,
                "created_at": "2024-01-01T12:00:00Z"
            }
        }

    @classmethod
    def from_mapping(cls, mapping: UrlMapping) -> "UrlResponse":
        return cls(
            id=mapping.id,
            original_url=mapping.original_url,
            short_url=mapping.short_url,
            short_code=mapping.short_code,
            click_count=mapping.click_count,
            created_at=mapping.created_at,
        )


class UrlListResponse(BaseModel):
    items: list[UrlResponse] = Field(default_factory=list, description="Short links, newest first")
    count: int = Field(0, description="Number of short links returned")


class UrlDeleteResponse(BaseModel):
    detail: str = Field(..., description="Outcome of the delete")
    id: str = Field(..., description="Identifier of the deleted short link")
    class Config:
        json_schema_extra = {
            "example": {
                "detail": "URL deleted successfully",
                "id": "3f7c1b0e9a2d4c6e8b1a5f0d2c4e6a8b"
            }
        }


class UrlErrorResponse(BaseModel):
    detail: str = Field(..., description="Error message detailing the issue with the URL operation")
    class Config:
        json_schema_extra = {
            "example": {
                "detail": "Short URL not found"
            }
        }
