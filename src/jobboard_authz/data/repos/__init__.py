"""Data repositories for principals and sub-admin grants."""

from .base import Repository
from .grants import GrantRepository
from .principals import PrincipalRepository

__all__ = [
    "Repository",
    "GrantRepository",
    "PrincipalRepository",
]
