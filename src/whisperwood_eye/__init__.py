from .config import InstallationConfig
from .installation import Installation, InstallationState
from .types import AnimationState, DetectionBatch, DetectionResult, Scene

__all__ = [
    "Installation",
    "InstallationConfig",
    "InstallationState",
    "AnimationState",
    "DetectionBatch",
    "DetectionResult",
    "Scene",
]
