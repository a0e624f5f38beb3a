"""Engine configuration."""
from .settings import OrbitalSettings, settings

__all__ = ["OrbitalSettings", "settings"]
