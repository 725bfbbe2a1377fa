"""Point geometry and convex hull computation."""
from .points import Point, ORIGIN, index_to_point, point_to_index, flip_vertical, rolling_average, angle_between
from .convex_hull import convex_hull, cluster_hull, DEFAULT_MERGE_DISTANCE
