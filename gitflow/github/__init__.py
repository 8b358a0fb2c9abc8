"""Hosting-platform gateway."""

from .gateway import GitFlowGateway
from .gh import GhGateway, ensure_gh_available

__all__ = ["GhGateway", "GitFlowGateway", "ensure_gh_available"]
