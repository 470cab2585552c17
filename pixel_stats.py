import numpy as np


def _as_pixels(pixels):
    return np.asarray(pixels, dtype=np.int64).reshape(-1, 3)


def average_colour(pixels):
    """Integer-truncated per-channel mean of a pixel set. Empty input gives (0, 0, 0)."""
    pixels = _as_pixels(pixels)
    if len(pixels) == 0:
        return (0, 0, 0)
    totals = pixels.sum(axis=0)
    return tuple(int(total) // len(pixels) for total in totals)


def dispersion(pixels, reference):
    """
    Average absolute deviation of the pixels from a reference colour.

    Each channel of each pixel contributes |reference - pixel| // 3, the
    contributions are summed and the total is divided by the pixel count.
    Both divisions truncate, so the score is a plain int.
    """
    pixels = _as_pixels(pixels)
    if len(pixels) == 0:
        raise ValueError("Dispersion is undefined for an empty region")
    reference = np.asarray(reference, dtype=np.int64)
    total = (np.abs(reference - pixels) // 3).sum()
    return int(total) // len(pixels)


def compute_integral_image(raster):
    """Summed-area table with a leading row and column of zeros, one plane per channel."""
    sums = np.cumsum(np.cumsum(np.asarray(raster, dtype=np.int64), axis=0), axis=1)
    return np.pad(sums, ((1, 0), (1, 0), (0, 0)))


def region_sum(integral, bbox):
    """Per-channel sum of the pixels inside bbox = (left, top, right, bottom)."""
    left, top, right, bottom = bbox
    return (integral[bottom, right] - integral[top, right]
            - integral[bottom, left] + integral[top, left])


def region_average(integral, bbox):
    """Same result as average_colour over the region, without touching its pixels."""
    left, top, right, bottom = bbox
    pixel_count = (right - left) * (bottom - top)
    if pixel_count <= 0:
        return (0, 0, 0)
    return tuple(int(total) // pixel_count for total in region_sum(integral, bbox))
