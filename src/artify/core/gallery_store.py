"""Gallery persistence for AI Artify.

The gallery is intentionally simple:

- the whole collection lives under a single storage key as a JSON array
- list order is reverse-chronological (newest first)
- every mutation rewrites the full array; there are no partial updates

:class:`GalleryStore` owns the in-memory collection.  The storage backend is
a passive mirror: it is read once by :meth:`GalleryStore.load` and written
after every mutation.  Writes are best-effort.  A failed write is logged and
recorded on the store but never undoes the in-memory change, so the current
session always sees a consistent gallery even when durable storage fails.

Storage backends implement the small :class:`GalleryStorage` protocol, a
``localStorage``-style key/value interface:

- :class:`MemoryStorage` keeps values in a dict.
- :class:`JsonFileStorage` keeps one ``<key>.json`` file per key in a
  directory.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from artify.core.errors import PersistenceFailure
from artify.core.models import GeneratedImage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "ai-artify-gallery"


class GalleryStorage(Protocol):
    """Key/value substrate the gallery is mirrored into."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage, lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """File-backed storage: each key is a ``<key>.json`` file in *directory*.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write never leaves a truncated gallery behind.
    """

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Return the file path holding *key*."""
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


def parse_gallery_payload(payload: str | None) -> list[GeneratedImage]:
    """Parse a persisted gallery payload into image records.

    The parse is all-or-nothing and never raises: a missing payload, invalid
    JSON, a non-list value, or any record that fails validation yields an
    empty gallery.

    Args:
        payload: Raw JSON text read from storage, or ``None``.

    Returns:
        Images in persisted (newest-first) order.
    """
    if payload is None:
        return []

    try:
        raw_entries = json.loads(payload)
    except (ValueError, RecursionError):
        logger.warning("Persisted gallery is not valid JSON; starting empty")
        return []

    if not isinstance(raw_entries, list):
        logger.warning("Persisted gallery is not a list; starting empty")
        return []

    try:
        return [GeneratedImage.model_validate(entry) for entry in raw_entries]
    except ValidationError as e:
        logger.warning("Persisted gallery has invalid records (%s); starting empty", e)
        return []


class GalleryStore:
    """Ordered, newest-first collection of generated images.

    Args:
        storage: Backend the collection is mirrored into.
        key: Storage key holding the JSON array.

    Attributes:
        last_persistence_error: The most recent :class:`PersistenceFailure`,
            or ``None`` if the last write succeeded.
    """

    def __init__(self, storage: GalleryStorage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._images: list[GeneratedImage] = []
        self.last_persistence_error: PersistenceFailure | None = None

    # ------------------------------------------------------------------
    # Reads.
    # ------------------------------------------------------------------

    def load(self) -> list[GeneratedImage]:
        """Reload the collection from storage.

        Missing or corrupt storage is not fatal: the gallery starts empty.

        Returns:
            The loaded images, newest first.
        """
        try:
            payload = self.storage.get(self.key)
        except (OSError, ValueError) as e:
            logger.warning("Could not read gallery from storage: %s", e)
            payload = None

        self._images = parse_gallery_payload(payload)
        logger.info("Loaded %d gallery image(s)", len(self._images))
        return list(self._images)

    @property
    def images(self) -> list[GeneratedImage]:
        """Snapshot of the collection, newest first."""
        return list(self._images)

    def get(self, image_id: str) -> GeneratedImage | None:
        """Return the image with *image_id*, or ``None``."""
        return next((img for img in self._images if img.id == image_id), None)

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[GeneratedImage]:
        return iter(list(self._images))

    # ------------------------------------------------------------------
    # Mutations.
    # ------------------------------------------------------------------

    def add(self, image: GeneratedImage) -> None:
        """Insert *image* at the head of the gallery and persist.

        Ids are not deduplicated; callers are responsible for uniqueness.
        """
        self._images = [image, *self._images]
        self._persist()

    def remove(self, image_id: str) -> bool:
        """Remove the image with *image_id* if present, then persist.

        Returns:
            ``True`` if an image was removed.
        """
        remaining = [img for img in self._images if img.id != image_id]
        removed = len(remaining) != len(self._images)
        self._images = remaining
        self._persist()
        return removed

    def clear(self) -> None:
        """Empty the gallery and delete the persisted entry."""
        self._images = []
        self._persist()

    # ------------------------------------------------------------------
    # Persistence.
    # ------------------------------------------------------------------

    def _persist(self) -> None:
        # An empty gallery deletes the key, so "emptied" and "never used"
        # both read back as absent rather than as "[]".
        try:
            if self._images:
                payload = json.dumps([img.to_record() for img in self._images])
                self.storage.set(self.key, payload)
            else:
                self.storage.delete(self.key)
        except (OSError, TypeError, ValueError) as e:
            failure = PersistenceFailure(f"Failed to persist gallery: {e}")
            failure.__cause__ = e
            self.last_persistence_error = failure
            logger.warning("%s", failure)
        else:
            self.last_persistence_error = None
