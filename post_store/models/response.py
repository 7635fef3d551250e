import datetime

from post_store.models.camel_model import CamelModel


class PostSummary(CamelModel):
    title: str
    slug: str
    post_path: str
    publication_timestamp: datetime.datetime
    categories: list[str]
    tags: list[str]
    author: str
    comments_enabled: bool


class Post(PostSummary):
    source_path: str
    body: str


class Page(CamelModel):
    posts: list[PostSummary]
