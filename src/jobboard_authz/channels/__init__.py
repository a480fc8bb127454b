"""HTTP channels for the authorization service."""

from .subadmin_router import create_subadmin_router

__all__ = ["create_subadmin_router"]
