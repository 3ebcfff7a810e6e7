"""Archive validation and normalization for uploaded static sites.

Turns raw zip bytes into an ordered list of ``StoredFile`` candidates:

1. Size and entry-count ceilings are checked before anything is read.
2. ``.`` segments are dropped from member names. Platform junk,
   traversal attempts, symlinks and disallowed extensions are skipped
   (non-fatal) and reported in ``ArchiveManifest.skipped``.
3. A wrapper directory (``site/index.html``, ``site/app.js`` ...) is detected
   from the first multi-segment path and stripped from every path.
4. Member bytes are counted while streaming, so the extraction ceiling
   aborts the instant it would be crossed.
5. An ``index.html`` entry point must exist at some depth.

Wrapper detection only looks at the first multi-segment entry. Archives
with several top-level directories (``site/`` and ``extra/``) strip the
first one only and keep the others at their original paths.
"""

from __future__ import annotations

import io
import logging
import stat
import zipfile
import zlib

from bobhost.core.content_types import content_type_for, is_allowed, is_markup
from bobhost.core.errors import ArchiveValidationError
from bobhost.models.artifacts import ArchiveManifest, StoredFile
from bobhost.models.config import ArchiveLimits

logger = logging.getLogger(__name__)

ENTRY_POINT = "index.html"

_READ_CHUNK = 64 * 1024

# OS-specific junk that archivers add on macOS and Windows.
_JUNK_DIRS = frozenset({"__MACOSX"})
_JUNK_FILES = frozenset({".DS_Store", "Thumbs.db", "desktop.ini"})


def is_platform_junk(path: str) -> bool:
    """Return True for metadata entries such as ``__MACOSX/`` or ``.DS_Store``."""
    parts = path.split("/")
    if any(part in _JUNK_DIRS for part in parts[:-1]):
        return True
    name = parts[-1]
    return name in _JUNK_FILES or name.startswith("._")


def is_suspicious_path(path: str) -> bool:
    """Traversal guard: parent segments, doubled separators, absolute paths."""
    if path.startswith("/") or "//" in path:
        return True
    return any(part == ".." for part in path.split("/"))


def strip_current_dir(path: str) -> str:
    """Drop ``.`` segments, so ``./site/index.html`` becomes ``site/index.html``."""
    return "/".join(part for part in path.split("/") if part != ".")


def is_entry_point(path: str) -> bool:
    normalized = path.lower()
    return normalized == ENTRY_POINT or normalized.endswith("/" + ENTRY_POINT)


def looks_like_html(text: str) -> bool:
    """Weak sanity check for markup: a doctype, ``<html`` or ``<head>``."""
    lowered = text.lower()
    return (
        lowered.lstrip().startswith("<!doctype html")
        or "<html" in lowered
        or "<head>" in lowered
    )


def detect_root_folder(paths: list[str]) -> str | None:
    """Return the wrapper directory implied by the first multi-segment path.

    The candidate must not contain a dot, so ``assets.v2/app.js`` is never
    treated as a wrapper. No wrapper is detected when any file sits at the
    archive root: ``index.html`` next to ``css/site.css`` keeps ``css/``.
    """
    if any("/" not in path for path in paths):
        return None
    for path in paths:
        parts = path.split("/")
        if len(parts) > 1:
            first = parts[0]
            if first and "." not in first:
                return first
            return None
    return None


def _is_symlink(info: zipfile.ZipInfo) -> bool:
    mode = (info.external_attr >> 16) & 0xFFFF
    return stat.S_IFMT(mode) == stat.S_IFLNK


class ArchiveValidator:
    """Validates raw archive bytes against ``ArchiveLimits``.

    Parameters
    ----------
    limits:
        Upload, entry-count and extraction ceilings.
    """

    def __init__(self, limits: ArchiveLimits | None = None) -> None:
        self.limits = limits or ArchiveLimits()

    def validate(self, raw: bytes) -> ArchiveManifest:
        """Validate *raw* and return the normalized file set.

        Raises
        ------
        ArchiveValidationError
            On any fatal structural or security failure. When no entry
            point is found, ``files`` lists every path that was kept.
        """
        if len(raw) > self.limits.max_upload_bytes:
            raise ArchiveValidationError(
                f"File too large: {len(raw)} bytes. Maximum size is "
                f"{self.limits.max_upload_bytes // (1024 * 1024)}MB"
            )

        try:
            archive = zipfile.ZipFile(io.BytesIO(raw))
        except zipfile.BadZipFile as exc:
            raise ArchiveValidationError(f"Not a valid ZIP archive: {exc}") from exc

        with archive:
            entries = archive.infolist()
            logger.debug("Archive has %d entries", len(entries))

            if not entries:
                raise ArchiveValidationError("ZIP file is empty")
            if len(entries) > self.limits.max_entries:
                raise ArchiveValidationError(
                    f"Too many files: {len(entries)}. Maximum is "
                    f"{self.limits.max_entries} files"
                )

            candidates, skipped = self._select_entries(entries)
            root_folder = detect_root_folder([path for path, _ in candidates])
            if root_folder:
                logger.info("Detected root folder: %r", root_folder)

            files, total_size, warnings = self._extract(
                archive, candidates, root_folder
            )

        if not files:
            raise ArchiveValidationError(
                "No valid files found in ZIP", files=skipped
            )

        entry_point = self._find_entry_point([f.path for f in files])
        if entry_point is None:
            raise ArchiveValidationError(
                "ZIP must contain an index.html file at the root or in a subdirectory",
                files=[f.path for f in files],
            )

        logger.info(
            "Validated archive: %d files, %d bytes, entry point %s",
            len(files),
            total_size,
            entry_point,
        )
        return ArchiveManifest(
            files=files,
            entry_point=entry_point,
            total_size=total_size,
            root_folder=root_folder,
            skipped=skipped,
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    @staticmethod
    def _select_entries(
        entries: list[zipfile.ZipInfo],
    ) -> tuple[list[tuple[str, zipfile.ZipInfo]], list[str]]:
        """Filter out directories, junk, unsafe paths and disallowed types."""
        kept: list[tuple[str, zipfile.ZipInfo]] = []
        skipped: list[str] = []
        for info in entries:
            if info.is_dir():
                continue
            path = strip_current_dir(info.filename.replace("\\", "/"))
            if not path:
                continue

            if is_platform_junk(path):
                continue
            if is_suspicious_path(path) or _is_symlink(info):
                logger.warning("Skipping suspicious path: %s", path)
                skipped.append(path)
                continue
            if not is_allowed(path):
                logger.warning("Skipping disallowed file type: %s", path)
                skipped.append(path)
                continue
            kept.append((path, info))
        return kept, skipped

    def _extract(
        self,
        archive: zipfile.ZipFile,
        candidates: list[tuple[str, zipfile.ZipInfo]],
        root_folder: str | None,
    ) -> tuple[list[StoredFile], int, list[str]]:
        files: list[StoredFile] = []
        warnings: list[str] = []
        seen: set[str] = set()
        total = 0
        prefix = f"{root_folder}/" if root_folder else ""

        for path, info in candidates:
            if prefix and path.startswith(prefix):
                path = path[len(prefix):]
            if not path:
                continue
            if path in seen:
                warnings.append(f"Duplicate path after normalization: {path}")
                continue

            data, total = self._read_member(archive, info, total)
            size = len(data)
            content_type = content_type_for(path)

            if is_markup(path):
                text = data.decode("utf-8", errors="replace")
                if not looks_like_html(text):
                    logger.warning("HTML file missing doctype/head: %s", path)
                    warnings.append(f"HTML file missing doctype/head: {path}")
                data = text.encode("utf-8")

            seen.add(path)
            files.append(
                StoredFile(path=path, data=data, content_type=content_type, size=size)
            )
            logger.debug("File: %s (%d bytes, %s)", path, size, content_type)

        return files, total, warnings

    def _read_member(
        self, archive: zipfile.ZipFile, info: zipfile.ZipInfo, total: int
    ) -> tuple[bytes, int]:
        """Stream one member, aborting as soon as the ceiling is crossed.

        The declared ``file_size`` is not trusted; bytes are counted as read.
        """
        ceiling = self.limits.max_extracted_bytes
        if total + info.file_size > ceiling:
            raise self._too_large(total + info.file_size)

        buffer = io.BytesIO()
        try:
            with archive.open(info, "r") as source:
                while True:
                    chunk = source.read(_READ_CHUNK)
                    if not chunk:
                        break
                    total += len(chunk)
                    if total > ceiling:
                        raise self._too_large(total)
                    buffer.write(chunk)
        except ArchiveValidationError:
            raise
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as exc:
            raise ArchiveValidationError(
                f"Could not read {info.filename}: {exc}"
            ) from exc
        return buffer.getvalue(), total

    def _too_large(self, total: int) -> ArchiveValidationError:
        logger.error("Total extracted size too large: %d bytes", total)
        return ArchiveValidationError(
            "Total extracted size exceeds limit of "
            f"{self.limits.max_extracted_bytes // (1024 * 1024)}MB"
        )

    @staticmethod
    def _find_entry_point(paths: list[str]) -> str | None:
        """Shallowest ``index.html``; the first one wins among equals."""
        found = [p for p in paths if is_entry_point(p)]
        if not found:
            return None
        return min(found, key=lambda p: p.count("/"))
