"""Surface flattening exports."""

from stubforge.surface.flatten import flatten_surface
from stubforge.surface.models import SurfaceMember, SurfaceRef, TypeSurface

__all__ = ["flatten_surface", "SurfaceMember", "SurfaceRef", "TypeSurface"]
