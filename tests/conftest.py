import datetime
from pathlib import Path
from typing import Any

import pytest
import yaml

from post_store.settings import Settings

DEFAULT_AUTHOR = "lin"


def pytest_configure():
    pytest.default_author = DEFAULT_AUTHOR
    pytest.post_dates = [
        datetime.datetime(2025, 5, 25, 9, 30),
        datetime.datetime(2025, 6, 2, 18, 0),
        datetime.datetime(2025, 7, 10, 7, 45),
    ]


@pytest.fixture(autouse=True)
def environment(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("CONTENT_ROOT_PATH", str(tmp_path / "posts"))
    monkeypatch.setenv("PUBLISH_ROOT_PATH", str(tmp_path / "public"))
    monkeypatch.setenv("PUBLISH_PROTOCOL", "file")
    monkeypatch.setenv("DEFAULT_AUTHOR", DEFAULT_AUTHOR)
    monkeypatch.setenv("DEFAULT_TIMEZONE", "UTC")
    monkeypatch.setenv("PUBLISH_FUTURE", "false")
    monkeypatch.delenv("AUTHORS", raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    root = tmp_path / "posts"
    root.mkdir(exist_ok=True)
    return root


@pytest.fixture
def make_document(faker):
    def make(body: str | None = None, **header: Any) -> str:
        header.setdefault("title", faker.sentence(nb_words=4))
        header = {key: value for key, value in header.items() if value is not None}
        if body is None:
            body = "\n\n".join(faker.paragraphs(3)) + "\n"
        dumped = yaml.safe_dump(header, sort_keys=False, allow_unicode=True)
        return f"---\n{dumped}---\n{body}"

    return make


@pytest.fixture
def write_post(content_root: Path, make_document):
    def write(name: str, content: str | None = None, **header: Any) -> Path:
        path = content_root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            content if content is not None else make_document(**header),
            encoding="utf-8",
        )
        return path

    return write


@pytest.fixture
def posts(write_post) -> list[Path]:
    """Three published posts, oldest first."""
    return [
        write_post(
            "2025-05-25-pointers-and-arrays.md",
            title="Pointers and arrays",
            date=pytest.post_dates[0],
            categories=["C/C++"],
            tags=["c", "pointers"],
        ),
        write_post(
            "2025-06-02-process-scheduling.md",
            title="Process scheduling",
            date=pytest.post_dates[1],
            categories=["Operating System"],
            tags=["os", "scheduling"],
        ),
        write_post(
            "2025-07-10-virtual-memory.md",
            title="Virtual memory",
            date=pytest.post_dates[2],
            categories=["Operating System", "Memory"],
            tags=["os", "paging"],
            comments=False,
        ),
    ]
