"""Repository interfaces for changelog persistence."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager


class ChangelogRepository(ABC):
    """Interface for reading and writing the changelog document."""

    @abstractmethod
    def read(self) -> str:
        """
        Read the current changelog document.

        Returns:
            The document text, empty if it does not exist yet

        Raises:
            RuntimeError: If the document exists but cannot be read
        """
        ...

    @abstractmethod
    def write(self, content: str) -> None:
        """
        Replace the changelog document.

        Either the whole content is written or the previous document is kept.

        Args:
            content: New document text

        Raises:
            RuntimeError: If the document cannot be written
        """
        ...

    @abstractmethod
    def lock(self) -> AbstractContextManager[None]:
        """
        Hold exclusive write access to the changelog for a read-modify-write.

        Raises:
            RuntimeError: If the lock cannot be acquired
        """
        ...
