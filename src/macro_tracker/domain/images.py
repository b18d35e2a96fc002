"""Models for cached and searched food images."""

from pydantic import BaseModel, ConfigDict, Field


class ImageCacheEntry(BaseModel):
    """Stored image URL with the epoch-millisecond time it was cached."""

    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")
    timestamp: int = Field(ge=0)


class ImageCandidate(BaseModel):
    """One image result offered to the selector."""

    url: str
    title: str = ""
    snippet: str = ""
    context_link: str = ""
