# vidgrab/__init__.py
"""Interactive yt-dlp / FFmpeg launcher."""

__version__ = "2.0.0"
