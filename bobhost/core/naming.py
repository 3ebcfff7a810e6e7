"""Deployment name normalization and validation.

A requested name such as ``"https://www.My Cool Site!!"`` is reduced to a
base name (``my-cool-site``) and stored as a site name with the fixed
``.bob`` suffix (``my-cool-site.bob``). The site name is what the serving
layer receives.
"""

from __future__ import annotations

import re

from bobhost.core.errors import InvalidInputError

NAME_SUFFIX = ".bob"
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 50

NAME_PATTERN = re.compile(r"^[a-z0-9](-?[a-z0-9])*$")

_SCHEME_HOST_PREFIX = re.compile(r"^(https?://)?(www\.)?")
_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHENS = re.compile(r"-+")


def normalize_name(raw: str) -> str:
    """Reduce a user-supplied name to its base form.

    Lower-cases, strips ``http(s)://`` and ``www.``, keeps only the first
    path segment, drops an existing ``.bob`` suffix, turns whitespace into
    hyphens, removes anything outside ``[a-z0-9-]``, collapses repeated
    hyphens and trims hyphens from both ends. The result is not validated.
    """
    name = raw.lower().strip()
    name = _SCHEME_HOST_PREFIX.sub("", name)
    name = name.split("/")[0].strip()
    name = name.removesuffix(NAME_SUFFIX)
    name = _WHITESPACE.sub("-", name)
    name = _DISALLOWED.sub("", name)
    name = _HYPHENS.sub("-", name)
    return name.strip("-")


def validate_name(base: str) -> str:
    """Check length and pattern of a normalized base name."""
    if not MIN_NAME_LENGTH <= len(base) <= MAX_NAME_LENGTH:
        raise InvalidInputError(
            f"Invalid site name format: must be {MIN_NAME_LENGTH}-"
            f"{MAX_NAME_LENGTH} characters after normalization (got {base!r})"
        )
    if not NAME_PATTERN.match(base):
        raise InvalidInputError(
            "Invalid site name format: use lower-case letters, digits and "
            f"single hyphens (got {base!r})"
        )
    return base


def to_site_name(raw: str) -> str:
    """Normalize, validate and suffix a requested name."""
    return validate_name(normalize_name(raw)) + NAME_SUFFIX


def require_site_name(site_name: str) -> str:
    """Ensure a serving request names a suffixed site."""
    if not site_name or not site_name.endswith(NAME_SUFFIX):
        raise InvalidInputError(f"Invalid deployment URL: {site_name!r}")
    return site_name


def display_name(site_name: str) -> str:
    return site_name.removesuffix(NAME_SUFFIX)
