import logging
import os
import shutil
import time
import zipfile
from pathlib import Path
from typing import Tuple

from .constants import DefaultConfig
from .exceptions import ArchiveError


logger = logging.getLogger(__name__)


def default_archive_name() -> str:
    """``generated-crud-<epoch millis>.zip``"""
    return f"{DefaultConfig.ARCHIVE_NAME_PREFIX}-{int(time.time() * 1000)}.zip"


def create_zip_archive(source_dir, archive_name: str, dest_dir=None) -> Tuple[Path, int]:
    """
    Zip the contents of ``source_dir`` (paths relative to it) into ``archive_name``.

    The archive lands in ``dest_dir``, or in the current working directory
    when none is given. Returns the archive path and its size in bytes.
    """
    source = Path(source_dir)
    if not source.is_dir():
        raise ArchiveError(f"Nothing to archive: {source} is not a directory", source_dir=str(source))

    archive_path = (Path(dest_dir) if dest_dir else Path.cwd()).resolve() / archive_name
    # The source tree is removed after archiving, so the archive must live outside it
    if source.resolve() in archive_path.parents:
        raise ArchiveError(
            f"Archive {archive_path} would be written inside the directory being archived",
            source_dir=str(source),
            suggestions=["Run from outside the output directory or pass a destination directory"],
        )
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for root, dirs, files in os.walk(source):
                dirs.sort()
                for file_name in sorted(files):
                    file_path = Path(root) / file_name
                    zf.write(file_path, file_path.relative_to(source).as_posix())
    except OSError as e:
        raise ArchiveError(f"Could not write archive {archive_path}: {e}", source_dir=str(source)) from e

    byte_count = archive_path.stat().st_size
    logger.info(f"Archive created: {archive_path} ({byte_count} total bytes)")
    return archive_path, byte_count


def remove_output_directory(path) -> bool:
    """Delete a generated tree once it has been archived. Failures only warn."""
    target = Path(path)
    if not target.exists():
        return False
    try:
        shutil.rmtree(target)
    except OSError as e:
        logger.warning(f"Could not remove generated directory {target}: {e}")
        return False
    logger.info(f"Removed generated directory: {target}")
    return True
