"""YouTube to MP3/MP4 conversion service.

A request is validated, handed to ``yt-dlp`` and answered with a one-time
download link; artifacts live in a shared working directory that a periodic
retention sweep keeps bounded.
"""

from .main import create_app

__all__ = ["create_app"]
