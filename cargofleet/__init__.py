"""Discover Cargo projects, compare their metadata and supervise cargo runs."""

from .models import Project
from .registry import ProjectRegistry, scan_projects

__all__ = ["Project", "ProjectRegistry", "scan_projects"]

__version__ = "0.1.0"
