"""Models package."""

from .account import Account
from .video import Video
