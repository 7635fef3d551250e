import posixpath

from asyncssh import Error as SSHError
from aws_lambda_powertools import Logger
from fsspec import AbstractFileSystem, filesystem

from post_store.exceptions import PostValidationException, PublishException
from post_store.front_matter import serialize_document
from post_store.models.post import Post, PostKey
from post_store.services.post_service import PostService, sort_posts
from post_store.settings import Settings


class PublisherService:
    ERROR_POST_INVALID = "The post does not satisfy the metadata rules"

    def __init__(self):
        self._logger = Logger(utc=True)
        self._post_service = PostService()
        self._settings = Settings()

    def publish(self, key: PostKey) -> str:
        self._logger.info(f"Publishing post {key.post_path=}")
        post = self._post_service.get_post_by_key(key)
        return self._write(self._filesystem(), post)

    def publish_all(self) -> list[str]:
        snapshot = self._post_service.scan()
        posts = sort_posts(list(snapshot.published.values()))
        self._logger.info(f"Publishing {len(posts)} posts")
        if not posts:
            return []
        fs = self._filesystem()
        return [self._write(fs, post) for post in posts]

    def _filesystem(self) -> AbstractFileSystem:
        if self._settings.publish_protocol == "ssh":
            return filesystem(
                "ssh",
                host=self._settings.ssh_host,
                username=self._settings.ssh_username,
                password=self._settings.ssh_password,
            )
        return filesystem(self._settings.publish_protocol)

    def _write(self, fs: AbstractFileSystem, post: Post) -> str:
        if post.errors:
            self._logger.error(f"Refusing to publish {post.source_path=}")
            raise PostValidationException(self.ERROR_POST_INVALID, post.errors)
        path = posixpath.join(
            self._settings.publish_root_path, f"{post.key.post_path}.md"
        )
        data = serialize_document(post.front_matter, post.body).encode("utf-8")
        try:
            fs.makedirs(posixpath.dirname(path), exist_ok=True)
            with fs.open(path, "wb") as stream:
                stream.write(data)
        except (SSHError, OSError) as e:
            self._logger.error(e)
            raise PublishException(detail=str(e))
        return path
