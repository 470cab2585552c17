import numpy as np
from PIL import Image

from pixel_stats import (
    average_colour,
    compute_integral_image,
    dispersion,
    region_average,
)
from render import render_quadrant


DEFAULT_TREE_DEPTH = 20


def as_raster(image):
    """Turns a PIL image or an (H, W, 3) array into a read-only uint8 raster."""
    if isinstance(image, Image.Image):
        image = image.convert("RGB")
    raster = np.array(image, dtype=np.uint8)

    if raster.ndim != 3 or raster.shape[2] != 3:
        raise ValueError(f"Expected an RGB raster of shape (H, W, 3), got {raster.shape}")
    if raster.shape[0] == 0 or raster.shape[1] == 0:
        raise ValueError("Image is 0 pixels")

    raster.setflags(write=False)
    return raster


class Quadrant:
    def __init__(self, bbox, depth):
        self.bbox = bbox
        self.depth = depth
        # None for a leaf, otherwise [nw, ne, sw, se]
        self.children = None
        self.colour = (0, 0, 0)

    @property
    def leaf(self):
        return self.children is None

    @property
    def x(self):
        return self.bbox[0]

    @property
    def y(self):
        return self.bbox[1]

    @property
    def width(self):
        return self.bbox[2] - self.bbox[0]

    @property
    def height(self):
        return self.bbox[3] - self.bbox[1]

    @property
    def area(self):
        return self.width * self.height

    def can_split(self):
        return self.width // 2 > 0 and self.height // 2 > 0

    def split_quadrant(self):
        left, top, right, bottom = self.bbox

        # The east and south halves take the odd pixel
        middle_x = left + (right - left) // 2
        middle_y = top + (bottom - top) // 2

        north_west = Quadrant((left, top, middle_x, middle_y), self.depth + 1)
        north_east = Quadrant((middle_x, top, right, middle_y), self.depth + 1)
        south_west = Quadrant((left, middle_y, middle_x, bottom), self.depth + 1)
        south_east = Quadrant((middle_x, middle_y, right, bottom), self.depth + 1)

        self.children = [north_west, north_east, south_west, south_east]
        return self.children

    def collapse(self):
        """Drops the children. The cached colour already covers the whole region."""
        self.children = None

    def pixels(self, raster):
        left, top, right, bottom = self.bbox
        return raster[top:bottom, left:right]

    def walk(self):
        yield self
        if self.children is not None:
            for child in self.children:
                yield from child.walk()

    def tree_height(self):
        if self.children is None:
            return 0
        return max(child.tree_height() for child in self.children) + 1

    def __repr__(self):
        kind = "Leaf" if self.leaf else "Split"
        return f"{kind}(bbox={self.bbox}, depth={self.depth}, colour={self.colour})"


class QuadTree:
    """
    Quadtree over an RGB raster.

    The tree is split down to max_depth levels (or until a side would become
    0 pixels wide) as soon as it is created. Leaves cache the mean of their
    pixels, split nodes cache the mean of their four children. With weighted
    set, split nodes cache the exact mean of their own pixels instead.
    """

    def __init__(self, image, max_depth=DEFAULT_TREE_DEPTH, weighted=False):
        if max_depth < 0:
            raise ValueError(f"Tree depth must be non-negative, got {max_depth}")

        self.raster = as_raster(image)
        self.height, self.width = self.raster.shape[:2]
        self.max_depth = max_depth
        self.weighted = weighted

        integral = compute_integral_image(self.raster)
        self.root = Quadrant((0, 0, self.width, self.height), 0)
        self.build(self.root, max_depth, integral)

    def build(self, quadrant, depth_budget, integral):
        if depth_budget == 0 or not quadrant.can_split():
            quadrant.colour = region_average(integral, quadrant.bbox)
            return quadrant

        for child in quadrant.split_quadrant():
            self.build(child, depth_budget - 1, integral)
        quadrant.colour = self.merge_colours(quadrant, integral)
        return quadrant

    def merge_colours(self, quadrant, integral):
        if self.weighted:
            # Exact mean over the whole region, no truncation carried up from the children
            return region_average(integral, quadrant.bbox)
        return average_colour([child.colour for child in quadrant.children])

    def prune(self, tolerance):
        """
        Collapses every split node whose pixels deviate from its cached colour
        by no more than tolerance. Collapsed nodes are never split again, so a
        later call with a smaller tolerance works on the already pruned tree.
        """
        if tolerance < 0:
            raise ValueError(f"Tolerance must be non-negative, got {tolerance}")
        self.prune_quadrant(self.root, tolerance)

    def prune_quadrant(self, quadrant, tolerance):
        if quadrant.leaf:
            return

        if dispersion(quadrant.pixels(self.raster), quadrant.colour) <= tolerance:
            quadrant.collapse()
        else:
            for child in quadrant.children:
                self.prune_quadrant(child, tolerance)

    def render(self, out=None, depth=None):
        """Paints every leaf's colour over its rectangle and returns the raster."""
        if out is None:
            out = np.zeros(self.raster.shape, dtype=np.uint8)
        elif out.shape != self.raster.shape:
            raise ValueError(
                f"Output raster has shape {out.shape}, expected {self.raster.shape}"
            )

        render_quadrant(self.root, out, depth)
        return out

    def get_leaf_quadrants(self, depth=None):
        quadrants = []
        self.recursive_search(self.root, depth, quadrants.append)
        return quadrants

    def recursive_search(self, quadrant, max_depth, append_leaf):
        if quadrant.leaf or quadrant.depth == max_depth:
            append_leaf(quadrant)
        else:
            for child in quadrant.children:
                self.recursive_search(child, max_depth, append_leaf)

    def walk(self):
        return self.root.walk()

    def tree_height(self):
        return self.root.tree_height()

    def count_nodes(self):
        return sum(1 for _ in self.walk())

    def count_leaves(self):
        return sum(1 for quadrant in self.walk() if quadrant.leaf)
