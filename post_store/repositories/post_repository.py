import posixpath

import fsspec
from aws_lambda_powertools import Logger
from fsspec.implementations.local import make_path_posix

from post_store.settings import Settings


class PostRepository:
    EXTENSIONS = (".md", ".markdown")

    def __init__(self):
        self._logger = Logger(utc=True)
        settings = Settings()
        self._fs = fsspec.filesystem("file")
        self._root = make_path_posix(settings.content_root_path)

    def get_all_paths(self) -> list[str]:
        if not self._fs.isdir(self._root):
            self._logger.warning(f"Content root does not exist {self._root=}")
            return []
        return sorted(
            path
            for path in self._fs.find(self._root)
            if path.lower().endswith(self.EXTENSIONS)
        )

    def get_document(self, path: str) -> str:
        return self._fs.cat_file(path).decode("utf-8")

    def relative_path(self, path: str) -> str:
        return posixpath.relpath(path, self._root)
