import logging
from pathlib import Path
from typing import Protocol, Union

from .exceptions import FileStoreError


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileStore(Protocol):
    """Filesystem operations the generator needs."""

    def exists(self, path: PathLike) -> bool:
        ...

    def make_directory(self, path: PathLike, recursive: bool = True) -> None:
        ...

    def read_text(self, path: PathLike) -> str:
        ...

    def write_text(self, path: PathLike, text: str) -> None:
        ...


class LocalFileStore:
    """FileStore backed by the local filesystem; OS errors become FileStoreError."""

    encoding = "utf-8"

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def make_directory(self, path: PathLike, recursive: bool = True) -> None:
        try:
            Path(path).mkdir(parents=recursive, exist_ok=True)
        except OSError as e:
            raise FileStoreError(f"Could not create directory {path}: {e}", path=str(path)) from e

    def read_text(self, path: PathLike) -> str:
        try:
            with open(path, "r", encoding=self.encoding) as f:
                return f.read()
        except OSError as e:
            raise FileStoreError(f"Could not read {path}: {e}", path=str(path)) from e

    def write_text(self, path: PathLike, text: str) -> None:
        try:
            with open(path, "w", encoding=self.encoding, newline="") as f:
                f.write(text)
        except OSError as e:
            raise FileStoreError(f"Could not write {path}: {e}", path=str(path)) from e
        logger.debug(f"Wrote file: {path}")
