import datetime
import posixpath
from collections import Counter
from dataclasses import dataclass, field

import pendulum
from aws_lambda_powertools import Logger

from post_store.exceptions import DuplicatePostKeyException, PostNotFoundException
from post_store.models.post import (
    Post,
    PostKey,
    PostStatus,
    ScanReport,
    ValidationResult,
)
from post_store.models.response import Page, PostSummary
from post_store.models.response import Post as PostResponse
from post_store.repositories.post_repository import PostRepository
from post_store.schemas.post import PostFilter
from post_store.services.validation_service import ValidationService
from post_store.settings import Settings

DRAFTS_DIRECTORY = "_drafts"


@dataclass
class StoreSnapshot:
    posts: list[Post] = field(default_factory=list)
    published: dict[PostKey, Post] = field(default_factory=dict)
    duplicates: dict[PostKey, list[Post]] = field(default_factory=dict)
    report: ScanReport = field(default_factory=ScanReport)


def sort_posts(posts: list[Post]) -> list[Post]:
    """Newest first, ties broken by slug ascending."""
    return sorted(
        sorted(posts, key=lambda post: post.slug),
        key=lambda post: post.publication_timestamp,
        reverse=True,
    )


def to_summary(post: Post) -> PostSummary:
    return PostSummary(
        title=post.title,
        slug=post.slug,
        post_path=post.key.post_path,
        publication_timestamp=post.publication_timestamp,
        categories=post.categories,
        tags=post.tags,
        author=post.author,
        comments_enabled=post.comments_enabled,
    )


class PostService:
    ERROR_POST_DUPLICATED = "More than one post resolves to {key}"
    ERROR_POST_NOT_FOUND = "The requested post was not found"

    def __init__(self):
        self._logger = Logger(utc=True)
        self._settings = Settings()
        self._repo = PostRepository()
        self._validation_service = ValidationService()

    def scan(self) -> StoreSnapshot:
        snapshot = StoreSnapshot()
        candidates: dict[PostKey, list[Post]] = {}
        for path in self._repo.get_all_paths():
            relative_path = self._repo.relative_path(path)
            post = self._read_post(path, relative_path)
            snapshot.posts.append(post)
            if post.errors:
                self._logger.warning(f"Invalid post {relative_path=} {post.errors=}")
                snapshot.report.invalid[relative_path] = post.errors
            match post.status:
                case PostStatus.DRAFT:
                    snapshot.report.drafts.append(relative_path)
                case PostStatus.RETRACTED:
                    snapshot.report.retracted.append(relative_path)
                case PostStatus.PUBLISHED:
                    candidates.setdefault(post.key, []).append(post)

        for key, posts in candidates.items():
            if len(posts) == 1:
                snapshot.published[key] = posts[0]
                continue
            paths = [post.source_path for post in posts]
            self._logger.warning(f"Duplicate post key {key.post_path=} {paths=}")
            snapshot.duplicates[key] = posts
            snapshot.report.duplicates[key.post_path] = paths

        snapshot.report.total = len(snapshot.posts)
        snapshot.report.published = len(snapshot.published)
        self._logger.info(
            f"Scanned posts total={snapshot.report.total} "
            f"published={snapshot.report.published} "
            f"invalid={len(snapshot.report.invalid)} "
            f"duplicates={len(snapshot.report.duplicates)}"
        )
        return snapshot

    def _read_post(self, path: str, relative_path: str) -> Post:
        try:
            content = self._repo.get_document(path)
        except (OSError, UnicodeDecodeError) as exc:
            self._logger.warning(f"Failed to read post {relative_path=}")
            return Post(source_path=relative_path, errors=[f"unreadable file: {exc}"])
        post = self._validation_service.build_post(content, relative_path)
        post.status = self._classify(post)
        return post

    def _classify(self, post: Post) -> PostStatus:
        header = post.front_matter
        if header.get("published") is False:
            return PostStatus.RETRACTED
        if (
            post.errors
            or header.get("draft") is True
            or DRAFTS_DIRECTORY in posixpath.dirname(post.source_path).split("/")
        ):
            return PostStatus.DRAFT
        if (
            not self._settings.publish_future
            and post.publication_timestamp > pendulum.now()
        ):
            return PostStatus.DRAFT
        return PostStatus.PUBLISHED

    def _published_posts(self) -> list[Post]:
        return sort_posts(list(self.scan().published.values()))

    def list_posts(self, post_filter: PostFilter | None = None) -> Page:
        posts = self._published_posts()
        if post_filter:
            posts = [post for post in posts if self._matches(post, post_filter)]
        return Page(posts=[to_summary(post) for post in posts])

    @staticmethod
    def _matches(post: Post, post_filter: PostFilter) -> bool:
        date = post.publication_timestamp.date()
        return (
            (post_filter.category is None or post_filter.category in post.categories)
            and (post_filter.tag is None or post_filter.tag in post.tags)
            and (post_filter.date_from is None or post_filter.date_from <= date)
            and (post_filter.date_to is None or date <= post_filter.date_to)
        )

    def get_post_by_key(self, key: PostKey) -> Post:
        snapshot = self.scan()
        if key in snapshot.duplicates:
            self._logger.warning(f"Ambiguous post key {key.post_path=}")
            raise DuplicatePostKeyException(self.ERROR_POST_DUPLICATED.format(key=key))
        post = snapshot.published.get(key)
        if post is None:
            self._logger.warning(f"Post not found: {key.post_path=}")
            raise PostNotFoundException(self.ERROR_POST_NOT_FOUND)
        return post

    def get_post(self, date: datetime.date, slug: str) -> PostResponse:
        post = self.get_post_by_key(PostKey(date=date, slug=slug))
        return PostResponse(
            **to_summary(post).model_dump(),
            source_path=post.source_path,
            body=post.body,
        )

    def validate_post(self, content: str, path: str | None = None) -> ValidationResult:
        return self._validation_service.validate_post(content, path)

    def get_report(self) -> ScanReport:
        return self.scan().report

    def get_archive(self) -> dict[str, int]:
        posts = self._published_posts()
        if not posts:
            return {}
        dates = [pendulum.instance(post.publication_timestamp) for post in posts]
        archive = {}
        for dt in pendulum.interval(
            min(dates).start_of("month"), max(dates).end_of("month")
        ).range("months"):
            archive[dt.format("YYYY-MM")] = sum(
                1
                for date in dates
                if dt.start_of("month") <= date <= dt.end_of("month")
            )
        return archive

    def get_categories(self) -> dict[str, int]:
        counter = Counter(
            category for post in self._published_posts() for category in post.categories
        )
        return dict(sorted(counter.items()))

    def get_tags(self) -> dict[str, int]:
        counter = Counter(tag for post in self._published_posts() for tag in post.tags)
        return dict(sorted(counter.items()))
