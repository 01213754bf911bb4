__all__ = ["BootConfiguration", "TubelyContainer"]

from .tubely import BootConfiguration, TubelyContainer
