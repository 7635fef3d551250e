import datetime
from enum import Enum
from typing import Any

from pydantic import Field, computed_field

from post_store.models.camel_model import CamelModel, FrozenCamelModel


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    RETRACTED = "retracted"


class PostKey(FrozenCamelModel):
    date: datetime.date
    slug: str

    @computed_field
    @property
    def post_path(self) -> str:
        return f"{self.date:%Y/%m/%d}/{self.slug}"

    def __str__(self) -> str:
        return self.post_path


class Post(CamelModel):
    source_path: str
    title: str | None = None
    slug: str | None = None
    publication_timestamp: datetime.datetime | None = None
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    comments_enabled: bool = True
    body: str = ""
    front_matter: dict[Any, Any] = Field(default_factory=dict)
    status: PostStatus = PostStatus.DRAFT
    errors: list[str] = Field(default_factory=list)

    @property
    def key(self) -> PostKey | None:
        if self.publication_timestamp is None or not self.slug:
            return None
        timestamp = self.publication_timestamp
        return PostKey(
            date=datetime.date(timestamp.year, timestamp.month, timestamp.day),
            slug=self.slug,
        )


class ValidationResult(CamelModel):
    errors: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def valid(self) -> bool:
        return not self.errors


class ScanReport(CamelModel):
    total: int = 0
    published: int = 0
    drafts: list[str] = Field(default_factory=list)
    retracted: list[str] = Field(default_factory=list)
    invalid: dict[str, list[str]] = Field(default_factory=dict)
    duplicates: dict[str, list[str]] = Field(default_factory=dict)
