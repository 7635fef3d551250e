import datetime
import posixpath
import re
from typing import Any

import pendulum
from aws_lambda_powertools import Logger
from slugify import slugify

from post_store.exceptions import FrontMatterException
from post_store.front_matter import parse_document
from post_store.models.post import Post, ValidationResult
from post_store.settings import Settings

FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
DATED_FILE_NAME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")


def find_unterminated_fence(body: str) -> int | None:
    """Return the body line of a fenced block that is never closed, if any."""
    opening = None
    for lineno, line in enumerate(body.splitlines(), start=1):
        match = FENCE.match(line)
        if not match:
            continue
        fence, info = match.groups()
        if opening is None:
            # backtick fences may not carry backticks in their info string
            if fence[0] == "`" and "`" in info:
                continue
            opening = (fence[0], len(fence), lineno)
        elif fence[0] == opening[0] and len(fence) >= opening[1] and not info.strip():
            opening = None
    return opening[2] if opening else None


def file_name_date(path: str) -> datetime.date | None:
    stem = posixpath.splitext(posixpath.basename(path))[0]
    match = DATED_FILE_NAME.match(stem)
    if not match:
        return None
    try:
        return datetime.date(*(int(part) for part in match.groups()[:3]))
    except ValueError:
        return None


def file_name_slug(path: str) -> str | None:
    stem = posixpath.splitext(posixpath.basename(path))[0]
    match = DATED_FILE_NAME.match(stem)
    return match.group(4) if match else None


class ValidationService:
    ERROR_AUTHOR_TYPE = "author must be a non-empty string"
    ERROR_BOOLEAN = "{key} must be true or false"
    ERROR_DATE_MISMATCH = "date {date} does not match {file_date} in the file name"
    ERROR_DATE_MISSING = "date is required"
    ERROR_DATE_INVALID = "date {value!r} is not a valid date-time"
    ERROR_LABELS = "{key} must only contain non-empty text values"
    ERROR_SLUG_EMPTY = "slug cannot be derived from the title"
    ERROR_SLUG_UNSAFE = "slug {slug!r} is not URL-safe, use {suggestion!r}"
    ERROR_TITLE = "title must be a non-empty string"
    ERROR_UNKNOWN_AUTHOR = "author {author!r} is not a known author profile"
    ERROR_UNTERMINATED_FENCE = "fenced block opened at body line {line} is unterminated"

    def __init__(self):
        self._logger = Logger(utc=True)
        self._settings = Settings()

    def validate_post(self, content: str, path: str | None = None) -> ValidationResult:
        return ValidationResult(errors=self.build_post(content, path).errors)

    def build_post(self, content: str, path: str | None = None) -> Post:
        """Parse a document into a Post, collecting every violated rule.

        The returned Post carries whatever could be derived; its ``errors``
        list is empty only when the document satisfies all invariants.
        """
        path = path or ""
        errors = []
        try:
            header, body = parse_document(content)
        except FrontMatterException as exc:
            header, body = {}, content
            errors.append(str(exc))

        title = header.get("title")
        if not isinstance(title, str) or not title.strip():
            errors.append(self.ERROR_TITLE)
            title = None
        else:
            title = title.strip()

        timestamp = None
        if header.get("date") is None:
            errors.append(self.ERROR_DATE_MISSING)
        else:
            timestamp = self._to_datetime(header["date"])
            if timestamp is None:
                errors.append(self.ERROR_DATE_INVALID.format(value=header["date"]))
        file_date = file_name_date(path)
        if timestamp is not None and file_date and timestamp.date() != file_date:
            errors.append(
                self.ERROR_DATE_MISMATCH.format(
                    date=timestamp.to_date_string(), file_date=file_date.isoformat()
                )
            )

        slug = self._slug(header, title, errors)
        name = file_name_slug(path)
        if slug and name and name != slug:
            self._logger.warning(f"Slug differs from the file name {path=} {slug=}")
        categories = self._labels(header, "categories", errors)
        tags = list(dict.fromkeys(self._labels(header, "tags", errors)))

        author = header.get("author", self._settings.default_author)
        if not isinstance(author, str) or not author.strip():
            errors.append(self.ERROR_AUTHOR_TYPE)
            author = None
        elif self._settings.authors and author not in self._settings.authors:
            errors.append(self.ERROR_UNKNOWN_AUTHOR.format(author=author))

        for key in ("comments", "draft", "published"):
            if key in header and not isinstance(header[key], bool):
                errors.append(self.ERROR_BOOLEAN.format(key=key))

        line = find_unterminated_fence(body)
        if line is not None:
            errors.append(self.ERROR_UNTERMINATED_FENCE.format(line=line))

        if errors:
            self._logger.debug(f"Document failed validation {path=} {errors=}")
        return Post(
            source_path=path,
            title=title,
            slug=slug,
            publication_timestamp=timestamp,
            categories=categories,
            tags=tags,
            author=author,
            comments_enabled=header.get("comments") is not False,
            body=body,
            front_matter=header,
            errors=errors,
        )

    def _to_datetime(self, value: Any) -> pendulum.DateTime | None:
        tz = self._settings.default_timezone
        if isinstance(value, datetime.datetime):
            return pendulum.instance(value, tz=tz)
        if isinstance(value, datetime.date):
            return pendulum.datetime(value.year, value.month, value.day, tz=tz)
        if isinstance(value, str):
            try:
                parsed = pendulum.parse(value, tz=tz)
            except ValueError:
                return None
            return parsed if isinstance(parsed, pendulum.DateTime) else None
        return None

    def _slug(
        self, header: dict[str, Any], title: str | None, errors: list[str]
    ) -> str | None:
        explicit = header.get("slug")
        if explicit is not None:
            suggestion = slugify(str(explicit))
            if not suggestion or explicit != suggestion:
                errors.append(
                    self.ERROR_SLUG_UNSAFE.format(slug=explicit, suggestion=suggestion)
                )
                return None
            return explicit
        if title is None:
            return None
        slug = slugify(title)
        if not slug:
            errors.append(self.ERROR_SLUG_EMPTY)
            return None
        return slug

    def _labels(self, header: dict[str, Any], key: str, errors: list[str]) -> list[str]:
        value = header.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(
            isinstance(item, str) and item.strip() for item in value
        ):
            errors.append(self.ERROR_LABELS.format(key=key))
            return []
        return [item.strip() for item in value]
