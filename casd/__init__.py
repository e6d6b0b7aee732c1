# -*- coding: utf-8 -*-
"""casd copies files into a content-addressed directory. Each stored object is
named by the hash of its own bytes, so the same content always lands at the
same path and is never written twice.

Two front-ends share the store:

- `casd`, which keeps a store in a `.casd` directory found by walking up from
  the working directory (much like a version-control checkout).
- `store`, which files clippings and screenshots into a configured directory
  and puts the resulting path on the clipboard.
"""

from .checksum import digest
from .discovery import init_store, locate, locate_store
from .store import Store
from .store_entry import StoreEntry

__all__ = ("Store", "StoreEntry", "digest", "init_store", "locate", "locate_store")
