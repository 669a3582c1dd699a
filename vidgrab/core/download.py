# vidgrab/core/download.py
from __future__ import annotations
from pathlib import Path
from typing import Callable, Optional
import logging
import time

import requests

from .http import SESSION

logger = logging.getLogger(__name__)

ProgressCB = Callable[[int, int], None]  # (downloaded_bytes, total_bytes)

def fetch(
    url: str,
    out_path: Path,
    max_attempts: int = 3,
    delay: float = 2.0,
    on_progress: Optional[ProgressCB] = None,
    chunk_size: int = 128 * 1024,
) -> bool:
    """
    Stream `url` into `out_path`, retrying the whole transfer on failure.
    - Every attempt restarts from byte zero and overwrites the previous one
    - Waits `delay` seconds between attempts, never after the last one
    - Returns False once all attempts failed; errors are logged, not raised
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        logger.info("Downloading %s (attempt %d of %d)", url, attempt, max_attempts)
        try:
            written, total = _stream_to_file(url, out_path, on_progress, chunk_size)
            if written == 0:
                raise OSError("empty response body")
            if total and written != total:
                raise OSError(f"size mismatch: expected {total} bytes, got {written}")
            logger.debug("Download finished: %s (%d bytes)", out_path, written)
            return True
        except (requests.RequestException, OSError) as e:
            logger.warning("Attempt %d failed: %s", attempt, e)
            _discard(out_path)
            if attempt < max_attempts:
                time.sleep(delay)
    return False

def _stream_to_file(
    url: str,
    out_path: Path,
    on_progress: Optional[ProgressCB],
    chunk_size: int,
) -> tuple[int, int]:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with SESSION.get(url, stream=True, timeout=30) as r:
        r.raise_for_status()
        total = int(r.headers.get("Content-Length", "0") or 0)
        if r.headers.get("Content-Encoding"):
            # Content-Length counts compressed bytes; iter_content yields decoded ones
            total = 0
        downloaded = 0
        with open(out_path, "wb") as f:
            for chunk in r.iter_content(chunk_size=chunk_size):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)
                if on_progress:
                    on_progress(downloaded, total)
    return downloaded, total

def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.debug("Could not remove partial file %s: %s", path, e)
