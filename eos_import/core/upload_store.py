"""Temporary upload storage with ownership tickets.

An upload is written under a generated name and a ticket binds that name to
the uploading user and declared import type. The follow-up import call must
present the same user and type; the file and ticket are removed when the
import finishes, whatever its outcome. Tickets expire after a TTL, and files
older than the TTL are swept.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import redis as redis_lib
from pydantic import BaseModel

from eos_import.core.errors import (
    UploadNotFoundError,
    UploadOwnershipError,
    UploadTooLargeError,
)
from eos_import.core.id_gen import generate_token
from eos_import.core.models import ImportType
from eos_import.core.redis_client import get_redis_client

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "csvFile-"
COPY_CHUNK_BYTES = 1024 * 1024


class UploadTicket(BaseModel):
    filename: str
    user_id: str
    import_type: ImportType
    original_name: Optional[str] = None
    created_at: datetime


class TicketStore(ABC):
    @abstractmethod
    def put(self, ticket: UploadTicket, ttl_seconds: int) -> None: ...

    @abstractmethod
    def get(self, filename: str) -> Optional[UploadTicket]: ...

    @abstractmethod
    def delete(self, filename: str) -> None: ...


class MemoryTicketStore(TicketStore):
    def __init__(self):
        self._tickets: dict[str, tuple[float, UploadTicket]] = {}

    def put(self, ticket: UploadTicket, ttl_seconds: int) -> None:
        self._tickets[ticket.filename] = (time.monotonic() + ttl_seconds, ticket)

    def get(self, filename: str) -> Optional[UploadTicket]:
        entry = self._tickets.get(filename)
        if entry is None:
            return None
        expires_at, ticket = entry
        if time.monotonic() >= expires_at:
            del self._tickets[filename]
            return None
        return ticket

    def delete(self, filename: str) -> None:
        self._tickets.pop(filename, None)


class RedisTicketStore(TicketStore):
    """Tickets stored as JSON under upload:{filename} with a Redis TTL."""

    def __init__(self, client: Optional[redis_lib.Redis] = None, prefix: str = "upload"):
        self._client = client
        self._prefix = prefix

    @property
    def client(self) -> redis_lib.Redis:
        return self._client or get_redis_client()

    def _key(self, filename: str) -> str:
        return f"{self._prefix}:{filename}"

    def put(self, ticket: UploadTicket, ttl_seconds: int) -> None:
        self.client.setex(self._key(ticket.filename), ttl_seconds, ticket.model_dump_json())

    def get(self, filename: str) -> Optional[UploadTicket]:
        raw = self.client.get(self._key(filename))
        if raw is None:
            return None
        return UploadTicket(**json.loads(raw))

    def delete(self, filename: str) -> None:
        self.client.delete(self._key(filename))


class UploadStore:
    """Upload directory plus the tickets that guard it."""

    def __init__(
        self,
        upload_dir: Path,
        tickets: TicketStore,
        ttl_seconds: int,
        max_bytes: Optional[int] = None,
    ):
        self.upload_dir = Path(upload_dir)
        self.tickets = tickets
        self.ttl_seconds = ttl_seconds
        self.max_bytes = max_bytes

    def ensure_dir(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        """Resolve a client-supplied filename inside the upload directory.

        Anything that is not a bare generated name is treated as unknown.
        """
        if not filename or Path(filename).name != filename or not filename.startswith(FILENAME_PREFIX):
            raise UploadNotFoundError(filename)
        return self.upload_dir / filename

    def save(self, source: BinaryIO, original_name: Optional[str]) -> Path:
        """Copy an upload stream to a freshly named file and return its path."""
        self.ensure_dir()
        suffix = Path(original_name or "").suffix.lower() or ".csv"
        dest = self.upload_dir / generate_token(FILENAME_PREFIX)
        dest = dest.with_name(dest.name + suffix)

        written = 0
        try:
            with dest.open("wb") as out:
                while True:
                    chunk = source.read(COPY_CHUNK_BYTES)
                    if not chunk:
                        break
                    written += len(chunk)
                    if self.max_bytes is not None and written > self.max_bytes:
                        raise UploadTooLargeError(self.max_bytes)
                    out.write(chunk)
        except Exception:
            dest.unlink(missing_ok=True)
            raise

        logger.info(f"Stored upload '{original_name}' as {dest.name} ({written} bytes)")
        return dest

    def issue_ticket(
        self,
        filename: str,
        user_id: str,
        import_type: ImportType,
        original_name: Optional[str] = None,
    ) -> UploadTicket:
        ticket = UploadTicket(
            filename=filename,
            user_id=user_id,
            import_type=import_type,
            original_name=original_name,
            created_at=datetime.now(timezone.utc),
        )
        self.tickets.put(ticket, self.ttl_seconds)
        return ticket

    def claim(self, filename: str, user_id: str, import_type: ImportType) -> Path:
        """Verify a follow-up call may use this upload and return its path.

        Raises UploadNotFoundError when the file or its ticket is gone, and
        UploadOwnershipError when another user or type presents it.
        """
        path = self.path_for(filename)
        ticket = self.tickets.get(filename)

        if not path.exists():
            if ticket is not None:
                self.tickets.delete(filename)
            raise UploadNotFoundError(filename)
        if ticket is None:
            # Ticket expired: the file is an orphan now
            path.unlink(missing_ok=True)
            raise UploadNotFoundError(filename)

        if ticket.user_id != user_id:
            raise UploadOwnershipError(f"Upload '{filename}' belongs to another user")
        if ticket.import_type != import_type:
            raise UploadOwnershipError(
                f"Upload '{filename}' was declared as '{ticket.import_type.value}', "
                f"not '{import_type.value}'"
            )
        return path

    def discard(self, filename: str) -> None:
        """Remove an upload and its ticket; missing pieces are ignored."""
        try:
            path = self.path_for(filename)
        except UploadNotFoundError:
            return
        path.unlink(missing_ok=True)
        self.tickets.delete(filename)
        logger.info(f"Removed upload {filename}")

    @contextmanager
    def consume(self, filename: str, user_id: str, import_type: ImportType) -> Iterator[Path]:
        """Claim an upload for the duration of a block, then always discard it."""
        path = self.claim(filename, user_id, import_type)
        try:
            yield path
        finally:
            self.discard(filename)

    def purge_stale(self) -> int:
        """Delete upload files older than the ticket TTL. Returns the count removed."""
        if not self.upload_dir.exists():
            return 0
        cutoff = time.time() - self.ttl_seconds
        removed = 0
        for path in self.upload_dir.glob(f"{FILENAME_PREFIX}*"):
            try:
                if path.is_file() and path.stat().st_mtime < cutoff:
                    path.unlink()
                    self.tickets.delete(path.name)
                    removed += 1
            except FileNotFoundError:
                continue
        if removed:
            logger.info(f"Purged {removed} stale uploads from {self.upload_dir}")
        return removed
