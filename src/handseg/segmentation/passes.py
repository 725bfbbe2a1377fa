"""
Segmentation Passes
====================

The two scans over a frame, written as folds over boolean pixel masks.

Pass 1 walks every skin candidate in row-major order, applies the
hysteresis rule and clusters qualifying pixels into blobs, tracking the
dominant one. Pass 2 restricts itself to the dominant blob's bounding box,
refines its mean point and width, and records the scan-order
classification changes that serve as contour points.

Both passes are pure: they take masks and a blob and return new values.
The row order is whatever the masks hold; the engine hands them over
bottom row first.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..geometry.points import ORIGIN, Point, index_to_point
from .blob import SEARCH_RANGE, SkinBlob

logger = logging.getLogger(__name__)

# Scan positions a confirmed skin pixel keeps the lenient threshold open for.
CLOSE_THRESHOLD = 5

# Blobs at or below this bounding-box area are dropped when they fail a test.
MIN_BLOB_AREA = 1.0


@dataclass
class PassOneResult:
    """Blob clustering outcome for one frame."""
    blobs: List[SkinBlob]
    largest: SkinBlob
    mask: np.ndarray  # H x W, True where a pixel qualified as skin


@dataclass
class PassTwoResult:
    """Dominant blob refinement outcome for one frame."""
    blob: SkinBlob
    contour: List[Point] = field(default_factory=list)
    mask: Optional[np.ndarray] = None  # H x W, True where a pixel counted towards the blob


def assign_point(
    blobs: Sequence[SkinBlob],
    point: Point,
    largest: SkinBlob,
    min_blob_area: float = MIN_BLOB_AREA,
    search_range: float = SEARCH_RANGE,
) -> Tuple[List[SkinBlob], SkinBlob]:
    """
    Give a skin pixel to the first blob that accepts it.

    Blobs are tried in creation order. A blob that rejects the point and
    has area <= min_blob_area is pruned on the spot. If no blob accepts the
    point a new blob is seeded there. The absorbing blob replaces the
    dominant blob when it is at least as large by both area and size.

    Args:
        blobs: Current blobs in creation order
        point: Pixel coordinate of a qualifying pixel
        largest: Current dominant blob
        min_blob_area: Pruning area limit
        search_range: Merge margin for newly seeded blobs

    Returns:
        (updated blobs, updated dominant blob)
    """
    remaining = list(blobs)
    i = 0
    while i < len(remaining):
        grown = remaining[i].test_point(point)
        if grown is not None:
            remaining[i] = grown
            if grown.outranks(largest):
                largest = grown
            return remaining, largest

        if remaining[i].area <= min_blob_area:
            del remaining[i]
        else:
            i += 1

    remaining.append(SkinBlob.seed(point, search_range))
    return remaining, largest


def pass_one(
    strict: np.ndarray,
    lenient: np.ndarray,
    close_threshold: int = CLOSE_THRESHOLD,
    min_blob_area: float = MIN_BLOB_AREA,
    search_range: float = SEARCH_RANGE,
) -> PassOneResult:
    """
    Classify and cluster skin pixels.

    A pixel qualifies if it passes the strict mask, or if it passes the
    lenient mask and the previous qualifying pixel is at most
    close_threshold scan positions behind it.

    Args:
        strict: H x W mask of pixels passing the full threshold
        lenient: H x W mask of pixels passing half the threshold
        close_threshold: Hysteresis reach along the scan order
        min_blob_area: Pruning area limit
        search_range: Merge margin for seeded blobs

    Returns:
        PassOneResult with surviving blobs, the dominant blob and the
        qualifying mask
    """
    height, width = strict.shape
    strict_flat = strict.ravel()
    candidates = np.flatnonzero(strict_flat | lenient.ravel())

    qualifying = np.zeros(strict_flat.size, dtype=bool)
    blobs: List[SkinBlob] = []
    largest = SkinBlob.seed(ORIGIN, search_range)
    last_hit = None

    for index in candidates.tolist():
        near_skin = last_hit is not None and index - last_hit <= close_threshold
        if not (strict_flat[index] or near_skin):
            continue

        qualifying[index] = True
        last_hit = index
        blobs, largest = assign_point(
            blobs, index_to_point(width, index), largest, min_blob_area, search_range)

    return PassOneResult(blobs=blobs, largest=largest, mask=qualifying.reshape(height, width))


def box_interior(shape: Tuple[int, int], blob: SkinBlob) -> np.ndarray:
    """H x W mask of pixels strictly inside the blob's bounding box."""
    height, width = shape
    rows = np.arange(height)
    cols = np.arange(width)
    row_in = (rows > blob.min_point.y) & (rows < blob.max_point.y)
    col_in = (cols > blob.min_point.x) & (cols < blob.max_point.x)
    return row_in[:, None] & col_in[None, :]


def pass_two(lenient: np.ndarray, largest: SkinBlob) -> PassTwoResult:
    """
    Refine the dominant blob and collect contour points.

    Pixels strictly inside the blob's bounding box that pass the lenient
    mask count towards the blob: they are folded into its mean point and
    extend the current horizontal run. A run is reported to the blob's
    width when a non-counting pixel ends it. A contour point is recorded
    wherever the counting state differs from the previous pixel in scan
    order (the pixel before the first is treated as non-counting).

    Args:
        lenient: H x W mask of pixels passing a third of the threshold
        largest: Dominant blob from pass one

    Returns:
        PassTwoResult with the refined blob, contour points and count mask
    """
    height, width = lenient.shape
    counted = box_interior((height, width), largest) & lenient
    flat = counted.ravel()

    indices = np.flatnonzero(flat)
    blob = largest.add_points_to_mean(indices % width, indices // width)

    previous = np.concatenate(([False], flat[:-1]))
    changes = np.flatnonzero(flat != previous)
    contour = [index_to_point(width, index) for index in changes.tolist()]

    # Changes alternate run start / run end; a run still open at the last
    # pixel is never reported.
    starts = changes[flat[changes]]
    ends = changes[~flat[changes]]
    if len(ends):
        blob = blob.test_width(int(np.max(ends - starts[:len(ends)])))

    return PassTwoResult(blob=blob, contour=contour, mask=counted)
