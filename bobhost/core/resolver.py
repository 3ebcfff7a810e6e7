"""Serving resolver — maps (site name, request path) to stored bytes.

Resolution order:

1. The site name must carry the ``.bob`` suffix and belong to a READY
   deployment. Queued and binned deployments are not servable.
2. An empty path means ``index.html``; a path ending in ``/`` means that
   directory's ``index.html``.
3. ``<artifact-hash>/<path>`` is fetched from the object store. If it is
   missing, ``<artifact-hash>/index.html`` is served instead so that
   client-side routers keep working.
4. HTML has any ``<base>`` tag replaced by one pointing at the serving
   mount, so relative asset URLs resolve without the uploaded document
   knowing its own deployment name.

HTML is never cached at the edge. Everything else is immutable: the bytes
behind an (artifact hash, path) pair never change.
"""

from __future__ import annotations

import logging
import re

from bobhost.core.content_types import content_type_for, is_markup
from bobhost.core.deployment_registry import DeploymentRegistry
from bobhost.core.errors import InvalidInputError, NotFoundError, ObjectNotFoundError
from bobhost.core.ingestion import object_key
from bobhost.core.naming import require_site_name
from bobhost.core.object_store import ObjectStore
from bobhost.models.serving import (
    CACHE_HTML,
    CACHE_IMMUTABLE,
    HTML_CONTENT_TYPE,
    ServedContent,
)

logger = logging.getLogger(__name__)

INDEX_DOCUMENT = "index.html"

_BASE_TAG = re.compile(r"<base\b[^>]*>", re.IGNORECASE)
_HEAD_TAG = re.compile(r"<head(\s[^>]*)?>", re.IGNORECASE)


def rewrite_html(html: str, base_href: str) -> str:
    """Drop existing ``<base>`` tags and inject one right after ``<head>``.

    Without a ``<head>`` tag only the removal happens.
    """
    processed = _BASE_TAG.sub("", html)
    match = _HEAD_TAG.search(processed)
    if match is None:
        return processed
    insert_at = match.end()
    return f'{processed[:insert_at]}\n<base href="{base_href}">{processed[insert_at:]}'


def normalize_request_path(requested_path: str | None) -> str:
    """Turn a raw request sub-path into a key-safe relative path."""
    path = (requested_path or "").replace("\\", "/").lstrip("/")
    if not path:
        return INDEX_DOCUMENT
    if any(part in {".", ".."} for part in path.split("/")) or "//" in path:
        raise InvalidInputError(f"Invalid path: {requested_path!r}")
    if path.endswith("/"):
        path += INDEX_DOCUMENT
    return path


class ServingResolver:
    """Resolves serving requests against the registry and object store.

    Parameters
    ----------
    registry:
        Deployment registry used for name lookups.
    object_store:
        Blob storage holding artifact files.
    mount_prefix:
        First path segment of the serving mount, e.g. ``deploy``.
    """

    def __init__(
        self,
        registry: DeploymentRegistry,
        object_store: ObjectStore,
        *,
        mount_prefix: str = "deploy",
    ) -> None:
        self._registry = registry
        self._store = object_store
        self._mount_prefix = mount_prefix.strip("/")

    def base_href(self, site_name: str) -> str:
        return f"/{self._mount_prefix}/{site_name}/"

    def resolve(self, site_name: str, requested_path: str | None = "") -> ServedContent:
        """Return the content served for *requested_path* on *site_name*.

        Raises
        ------
        InvalidInputError
            If the site name lacks the suffix or the path is unsafe.
        NotFoundError
            If the deployment is not READY, or neither the file nor the
            ``index.html`` fallback exists.
        """
        require_site_name(site_name)
        path = normalize_request_path(requested_path)

        deployment = self._registry.get_ready_by_name(site_name)
        if deployment is None:
            logger.info("Deployment not found: %s", site_name)
            raise NotFoundError(f"Deployment not found: {site_name}")

        logger.debug("Serving: %s -> %s", site_name, path)
        fallback = False
        try:
            body = self._store.get(object_key(deployment.artifact_hash, path))
        except ObjectNotFoundError:
            if path == INDEX_DOCUMENT:
                raise NotFoundError(f"File not found: {path}") from None
            logger.debug("File not found, falling back to %s: %s", INDEX_DOCUMENT, path)
            try:
                body = self._store.get(
                    object_key(deployment.artifact_hash, INDEX_DOCUMENT)
                )
            except ObjectNotFoundError:
                raise NotFoundError(f"File not found: {path}") from None
            path = INDEX_DOCUMENT
            fallback = True

        if is_markup(path):
            html = body.decode("utf-8", errors="replace")
            rewritten = rewrite_html(html, self.base_href(site_name))
            return ServedContent(
                body=rewritten.encode("utf-8"),
                content_type=HTML_CONTENT_TYPE,
                cache_control=CACHE_HTML,
                path=path,
                fallback=fallback,
            )

        return ServedContent(
            body=body,
            content_type=content_type_for(path),
            cache_control=CACHE_IMMUTABLE,
            path=path,
            fallback=fallback,
        )
