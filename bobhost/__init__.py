"""bobhost: content-addressed static site hosting.

Uploads a zip of web assets, stores it once per SHA-256 digest, binds
human-chosen ``.bob`` names to it, and serves it with SPA index fallback:
  - Archive validation with traversal, bomb and file-type guards
  - Deduplicating, idempotent ingestion with bounded-concurrency uploads
  - Name registry with per-owner quotas, soft delete and restore
  - Reference-counted purge that reclaims storage on the last reference
"""

__version__ = "0.2.0"
__description__ = "Content-addressed static site hosting with reference-counted lifecycle"

from bobhost.core.host import StaticHost
from bobhost.cli.app import app as cli

__all__ = ["StaticHost", "cli", "__version__"]
