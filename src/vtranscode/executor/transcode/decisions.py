"""Option derivation from source metadata.

Pure functions computing the extra options a transcode needs: rotation
correction for sources with display rotation, and output dimensions that
keep the source aspect ratio.
"""

import logging
import math

from vtranscode.executor.transcode.types import (
    AspectRatioMode,
    EncodingOptions,
    OptionDelta,
)
from vtranscode.introspector.models import MovieMetadata

logger = logging.getLogger(__name__)

# Clears the rotation flag so players do not rotate the corrected output again
CLEAR_ROTATION_FLAG = ("metadata:s:v:0", "rotate=0")

ROTATION_FILTERS: dict[int, tuple[str, ...]] = {
    90: ("transpose=1",),
    180: ("hflip", "vflip"),
    270: ("transpose=2",),
}


def round_even(value: float) -> int:
    """Round to an even integer, as most encoders require even dimensions.

    Uses the ceiling when it is even, otherwise the floor; if the floor is
    odd too (``value`` is an odd integer) the result is bumped by one.
    """
    result = math.ceil(value)
    if result % 2 != 0:
        result = math.floor(value)
    if result % 2 != 0:
        result += 1
    return result


def derive_rotation_options(metadata: MovieMetadata) -> OptionDelta:
    """Compute filters that bake the source rotation into the pixels.

    Args:
        metadata: Source metadata.

    Returns:
        Delta with the transform filter and a cleared rotation flag, or an
        empty delta when the source is not rotated.
    """
    rotation = metadata.rotation
    if not rotation:
        return OptionDelta()

    filters = ROTATION_FILTERS.get(rotation)
    if filters is None:
        logger.warning(
            "Unsupported rotation %s for %s, not autorotating",
            rotation,
            metadata.path,
        )
        return OptionDelta()

    return OptionDelta(
        video_filters=filters,
        flags=(CLEAR_ROTATION_FLAG,),
        swaps_orientation=rotation in (90, 270),
    )


def derive_aspect_options(
    metadata: MovieMetadata,
    options: EncodingOptions,
    mode: AspectRatioMode,
    swapped: bool = False,
) -> OptionDelta:
    """Compute the output dimension that keeps the source aspect ratio.

    In WIDTH mode the requested width is kept and the height recomputed;
    HEIGHT mode is the reverse.

    Args:
        metadata: Source metadata.
        options: Request options holding the requested resolution.
        mode: Which requested dimension to keep.
        swapped: True when rotation correction swaps width and height, in
            which case the source aspect ratio is inverted.

    Returns:
        Delta carrying the full output size, or an empty delta when the
        mode is NONE or the aspect ratio or requested size is unknown.
    """
    if mode is AspectRatioMode.NONE:
        return OptionDelta()

    aspect_ratio = metadata.calculated_aspect_ratio
    if not aspect_ratio:
        logger.debug("No aspect ratio known for %s", metadata.path)
        return OptionDelta()
    if swapped:
        aspect_ratio = 1 / aspect_ratio

    if mode is AspectRatioMode.WIDTH:
        width = options.width
        if width is None:
            return OptionDelta()
        return OptionDelta(width=width, height=round_even(width / aspect_ratio))

    height = options.height
    if height is None:
        return OptionDelta()
    return OptionDelta(width=round_even(height * aspect_ratio), height=height)
