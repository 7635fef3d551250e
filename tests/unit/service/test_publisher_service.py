import datetime
from pathlib import Path
from unittest.mock import MagicMock

import asyncssh
import pytest
from pytest_mock import MockerFixture
from starlette import status

from post_store.exceptions import (
    PostNotFoundException,
    PostValidationException,
    PublishException,
)
from post_store.front_matter import parse_document
from post_store.models.post import Post, PostKey
from post_store.services.post_service import PostService
from post_store.services.publisher_service import PublisherService

ERROR_MESSAGE: str = "error"


class TestPublisherService:
    @pytest.fixture
    def key(self) -> PostKey:
        return PostKey(date=datetime.date(2025, 6, 2), slug="process-scheduling")

    @pytest.fixture
    def mock_filesystem(self, mocker: MockerFixture) -> MagicMock:
        return mocker.patch("post_store.services.publisher_service.filesystem")

    def test_successfully_publish(
        self,
        key: PostKey,
        posts: list[Path],
        publisher_service: PublisherService,
        tmp_path: Path,
    ):
        path = publisher_service.publish(key)

        target = tmp_path / "public" / "2025" / "06" / "02" / "process-scheduling.md"
        assert path == str(target)
        header, body = parse_document(target.read_text(encoding="utf-8"))
        source_header, source_body = parse_document(
            posts[1].read_text(encoding="utf-8")
        )
        assert header == source_header
        assert body == source_body

    def test_successfully_publish_all(
        self, posts: list[Path], publisher_service: PublisherService, tmp_path: Path
    ):
        paths = publisher_service.publish_all()

        assert paths == [
            str(tmp_path / "public" / "2025" / "07" / "10" / "virtual-memory.md"),
            str(tmp_path / "public" / "2025" / "06" / "02" / "process-scheduling.md"),
            str(tmp_path / "public" / "2025" / "05" / "25" / "pointers-and-arrays.md"),
        ]
        assert all(Path(path).is_file() for path in paths)

    def test_publish_all_without_posts(
        self, mock_filesystem: MagicMock, publisher_service: PublisherService
    ):
        assert publisher_service.publish_all() == []
        mock_filesystem.assert_not_called()

    def test_fail_to_publish_unknown_post(
        self,
        mock_filesystem: MagicMock,
        posts: list[Path],
        publisher_service: PublisherService,
    ):
        with pytest.raises(PostNotFoundException):
            publisher_service.publish(
                PostKey(date=datetime.date(2025, 1, 1), slug="missing")
            )

        mock_filesystem.assert_not_called()

    def test_fail_to_publish_invalid_post(
        self,
        mocker: MockerFixture,
        key: PostKey,
        mock_filesystem: MagicMock,
        publisher_service: PublisherService,
    ):
        mocker.patch.object(
            PostService,
            "get_post_by_key",
            return_value=Post(source_path="broken.md", errors=["date is required"]),
        )

        with pytest.raises(PostValidationException) as excinfo:
            publisher_service.publish(key)

        assert status.HTTP_422_UNPROCESSABLE_ENTITY == excinfo.value.status_code
        assert excinfo.value.errors == ["date is required"]
        mock_filesystem.return_value.open.assert_not_called()

    def test_successfully_publish_over_ssh(
        self,
        monkeypatch,
        key: PostKey,
        mock_filesystem: MagicMock,
        posts: list[Path],
    ):
        monkeypatch.setenv("PUBLISH_PROTOCOL", "ssh")
        monkeypatch.setenv("PUBLISH_ROOT_PATH", "/var/www/blog")
        monkeypatch.setenv("SSH_HOST", "example.com")
        monkeypatch.setenv("SSH_USERNAME", "deploy")
        monkeypatch.setenv("SSH_PASSWORD", "secret")
        mock_fs = mock_filesystem.return_value
        mock_stream = MagicMock()
        mock_fs.open.return_value.__enter__.return_value = mock_stream

        path = PublisherService().publish(key)

        assert path == "/var/www/blog/2025/06/02/process-scheduling.md"
        mock_filesystem.assert_called_once_with(
            "ssh", host="example.com", username="deploy", password="secret"
        )
        mock_fs.makedirs.assert_called_once_with(
            "/var/www/blog/2025/06/02", exist_ok=True
        )
        mock_fs.open.assert_called_once_with(path, "wb")
        mock_stream.write.assert_called_once_with(posts[1].read_bytes())

    def test_fail_to_publish_due_to_ssh_error(
        self,
        key: PostKey,
        mock_filesystem: MagicMock,
        posts: list[Path],
        publisher_service: PublisherService,
    ):
        mock_stream = MagicMock()
        mock_filesystem.return_value.open.return_value.__enter__.return_value = (
            mock_stream
        )
        mock_stream.write.side_effect = asyncssh.Error(code=1, reason=ERROR_MESSAGE)

        with pytest.raises(PublishException) as excinfo:
            publisher_service.publish(key)

        assert status.HTTP_500_INTERNAL_SERVER_ERROR == excinfo.value.status_code
        assert ERROR_MESSAGE == excinfo.value.detail

    def test_fail_to_publish_due_to_os_error(
        self,
        key: PostKey,
        mock_filesystem: MagicMock,
        posts: list[Path],
        publisher_service: PublisherService,
    ):
        mock_filesystem.return_value.makedirs.side_effect = OSError(ERROR_MESSAGE)

        with pytest.raises(PublishException) as excinfo:
            publisher_service.publish(key)

        assert ERROR_MESSAGE == excinfo.value.detail
