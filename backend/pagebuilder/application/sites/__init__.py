from .create_site import create_site

__all__ = ["create_site"]
