"""Deterministic naming of derived variants."""

from typing import Iterable, Optional

DERIVED_KEY_MARKER = "_rrs_w"


def split_extension(key: str) -> str:
    """Return the key without its last ``.``-separated extension."""
    stem, dot, _ = key.rpartition(".")
    return stem if dot else key


def derive_key(source_key: str, width: int, extension: str) -> str:
    """
    Compute the key a variant of ``source_key`` is stored under.

    Args:
        source_key: Key of the original object
        width: Target width in pixels
        extension: Extension of the output format, without the dot

    Returns:
        The derived key, e.g. ``photos/dog_rrs_w128.png``
    """
    return f"{split_extension(source_key)}{DERIVED_KEY_MARKER}{width}.{extension}"


def is_derived_key(key: str) -> bool:
    """True if ``key`` names a variant produced by this pipeline."""
    return DERIVED_KEY_MARKER in key


def rewrite_width_uri(
    uri: str,
    width: Optional[str],
    sizes: Iterable[int],
    force_extension: Optional[str] = None,
) -> str:
    """
    Rewrite a ``?width=`` request path to the matching derived key.

    Mirrors the CDN edge rule that serves variants: the URI is only rewritten
    when ``width`` is one of the configured sizes and the path has an
    extension. Anything else is served as requested.
    """
    if not width:
        return uri
    try:
        parsed_width = int(width)
    except ValueError:
        return uri
    if parsed_width not in set(sizes):
        return uri

    stem, dot, extension = uri.rpartition(".")
    if not dot:
        return uri
    return f"{stem}{DERIVED_KEY_MARKER}{parsed_width}.{force_extension or extension}"
