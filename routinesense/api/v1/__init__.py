from . import routines

__all__ = ["routines"]
