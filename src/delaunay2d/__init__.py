from .datastructures import Site, VoronoiEdge, TriangulationEdge, Triangulation
from .geometry import orientation, circumcircle, breakpoint_x, segment_intersection, point_in_polygon
from .voronoi import VoronoiGenerator, compute_triangulation
