"""Routers package."""

from . import (
    health,
    auth,
    videos,
    account,
)
