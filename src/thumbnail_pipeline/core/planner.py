"""Output dimension planning for a target width."""

from typing import Optional, Tuple


def plan_width(
    source_width: int,
    source_height: int,
    target_width: int,
    skip_upscaling: bool = True,
) -> Optional[Tuple[int, int]]:
    """
    Compute the output dimensions of a variant.

    The height is truncated with integer division, not rounded, so that
    variants keep the exact pixel dimensions earlier releases produced.

    Args:
        source_width: Width of the decoded image
        source_height: Height of the decoded image
        target_width: Configured target width
        skip_upscaling: Keep the native size when the image is not wider
            than the target

    Returns:
        ``(width, height)`` of the variant, or None for a zero-width source
    """
    if source_width <= 0:
        return None
    if skip_upscaling and source_width <= target_width:
        return source_width, source_height
    return target_width, source_height * target_width // source_width
