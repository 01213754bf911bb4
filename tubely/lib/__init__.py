from .sentinel import NotSet

__all__ = ["NotSet"]
