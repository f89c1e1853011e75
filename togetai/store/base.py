"""Record store interface shared by the file and relational backends."""

import abc
from typing import List, Optional

from togetai.models import FeedbackEntry


class RecordStore(abc.ABC):
    """Persistence for feedback entries.

    Implementations never let I/O errors escape: reads degrade to empty
    results and writes report failure through their return value. The only
    exception that crosses this boundary is ``DuplicateEmailError``.
    """

    backend_name = "abstract"

    @abc.abstractmethod
    async def initialize(self) -> None:
        """Make sure the storage target exists. Safe to call repeatedly."""

    @abc.abstractmethod
    async def list_all(self) -> List[FeedbackEntry]:
        ...

    @abc.abstractmethod
    async def find_by_email(self, email: str) -> Optional[FeedbackEntry]:
        ...

    @abc.abstractmethod
    async def insert(self, entry: FeedbackEntry) -> bool:
        """Append one entry.

        Returns False when the write failed, leaving the store unchanged.
        Raises DuplicateEmailError when the email is already stored.
        """

    @abc.abstractmethod
    async def delete_by_id(self, entry_id: str) -> bool:
        """Remove one entry. Returns whether a matching entry existed."""

    async def close(self) -> None:
        """Release any held resources."""
