"""Project and distribution detection."""

from .distributions import DetectedDistributions, detect_distributions
from .project import DetectionError, detect_project, new_project_config

__all__ = [
    "DetectedDistributions",
    "DetectionError",
    "detect_distributions",
    "detect_project",
    "new_project_config",
]
