# vidgrab/core/installer.py
"""
Archive installer: download a bundle, unpack it into a scratch folder, and copy
a fixed set of files out of its marker directory (e.g. FFmpeg's ``bin``).

The scratch folder and the downloaded archive are always removed afterwards,
whatever happened in between.
"""
from __future__ import annotations
import logging
import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path
from typing import Callable, Iterable, Optional

from .download import fetch
from .utils import url_leaf_name

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Path], bool]

TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.xz", ".txz", ".tar.bz2")


def install_bundle(
    archive_url: str,
    required: Iterable[str],
    marker: str,
    target_dir: Path,
    work_dir: Path,
    fetcher: Optional[Fetcher] = None,
) -> bool:
    """Returns True iff at least one required file was copied into target_dir."""
    fetcher = fetcher or fetch
    archive = work_dir / url_leaf_name(archive_url)
    scratch = work_dir / f"{archive_stem(archive.name)}_extract"

    try:
        work_dir.mkdir(parents=True, exist_ok=True)
        if not fetcher(archive_url, archive):
            logger.error("Could not download %s", archive_url)
            return False

        if scratch.exists():
            shutil.rmtree(scratch)
        scratch.mkdir(parents=True)

        logger.info("Extracting %s", archive.name)
        try:
            extract_archive(archive, scratch)
        except (zipfile.BadZipFile, tarfile.TarError, OSError, ValueError) as e:
            logger.error("Extraction failed: %s", e)
            return False

        source_dir = find_dir(scratch, marker)
        if source_dir is None:
            logger.error("No '%s' directory found inside %s", marker, archive.name)
            return False

        target_dir.mkdir(parents=True, exist_ok=True)
        names = list(required)
        copied = 0
        for name in names:
            src = source_dir / name
            if not src.is_file():
                logger.warning("  ✗ %s not found in the bundle", name)
                continue
            dst = target_dir / name
            try:
                shutil.copy2(src, dst)
            except OSError as e:
                logger.warning("  ✗ %s could not be copied: %s", name, e)
                continue
            make_executable(dst)
            copied += 1
            logger.info("  ✓ %s copied", name)

        if copied == 0:
            logger.error("None of %s were present in the bundle", ", ".join(names) or "the required files")
            return False
        logger.info("Installed %d of %d files into %s", copied, len(names), target_dir)
        return True
    except OSError as e:
        logger.error("Install into %s failed: %s", target_dir, e)
        return False
    finally:
        if scratch.exists():
            shutil.rmtree(scratch, ignore_errors=True)
        if archive.exists():
            try:
                archive.unlink()
            except OSError as e:
                logger.warning("Could not remove %s: %s", archive, e)


def archive_stem(name: str) -> str:
    low = name.lower()
    for suffix in TAR_SUFFIXES + (".zip",):
        if low.endswith(suffix):
            return name[: -len(suffix)]
    return Path(name).stem


def extract_archive(archive: Path, dest: Path) -> None:
    """Unpack a .zip or tarball into dest."""
    if archive.name.lower().endswith(TAR_SUFFIXES):
        with tarfile.open(archive, "r:*") as tf:
            if hasattr(tarfile, "data_filter"):
                tf.extractall(dest, filter="data")
            else:  # pragma: no cover - interpreters without extraction filters
                tf.extractall(dest)
        return
    with zipfile.ZipFile(archive, "r") as zf:
        zf.extractall(dest)


def find_dir(root: Path, name: str) -> Optional[Path]:
    """
    Depth-first search for the first directory called `name` below root.
    Children are visited in lexicographic order; symlinks are not followed.
    """
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except OSError:
        return None
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False):
            continue
        path = Path(entry.path)
        if entry.name == name:
            return path
        found = find_dir(path, name)
        if found is not None:
            return found
    return None


def make_executable(path: Path) -> None:
    if os.name == "nt":
        return
    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as e:
        logger.debug("chmod failed for %s: %s", path, e)
