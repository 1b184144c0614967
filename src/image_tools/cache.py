"""Thread-safe in-memory cache of decoded images."""

import logging
import threading
from collections import OrderedDict
from pathlib import Path
from typing import Optional

from PIL import Image

from .utils import load_image

logger = logging.getLogger(__name__)


class ImageCache:
    """
    Decode each image file once and serve later reads from memory.

    Entries are keyed by resolved path and evicted least-recently-used once
    ``max_images`` is exceeded. Cached images are shared between callers and
    must be treated as read-only.
    """

    def __init__(self, max_images: Optional[int] = 32):
        self.max_images = max_images
        self._images: "OrderedDict[str, Image.Image]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def _key(path: str) -> str:
        return str(Path(path).resolve())

    def load(self, path: str) -> Image.Image:
        """Return the decoded image for ``path`` (RGB, or RGBA when it has transparency)."""
        key = self._key(path)
        with self._lock:
            if key in self._images:
                self._images.move_to_end(key)
                return self._images[key]

        # Decode outside the lock; a concurrent load of the same file is harmless
        img = load_image(str(path), keep_alpha=True)

        with self._lock:
            if key not in self._images:
                self._images[key] = img
                logger.debug("Cached %s (%dx%d)", key, img.size[0], img.size[1])
            self._images.move_to_end(key)
            while self.max_images and len(self._images) > self.max_images:
                evicted, _ = self._images.popitem(last=False)
                logger.debug("Evicted %s", evicted)
            return self._images[key]

    def evict(self, path: str) -> bool:
        """Drop one entry; returns whether it was cached."""
        with self._lock:
            return self._images.pop(self._key(path), None) is not None

    def clear(self) -> None:
        with self._lock:
            self._images.clear()

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return self._key(path) in self._images

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)
