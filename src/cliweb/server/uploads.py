"""Persist uploaded files and turn them into flag values.

The page uploads the files chosen for an uploadable flag before it
executes a command. Each file is stored under the store's directory and the
response carries the value to put into the flag's input: the file's path
for scalar flags, or a CSV record of all paths for list flags (which
:func:`~cliweb.tree.flags.parse_list` splits back into the same paths).
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterable, Optional

from cliweb.exceptions import UploadError
from cliweb.models import FlagType
from cliweb.tree.flags import format_list

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_filename(filename: Optional[str]) -> str:
    """Reduce a client-supplied file name to a safe single path component.

    Example::

        >>> sanitize_filename("../../etc/my report.txt")
        'my_report.txt'
    """
    name = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name or "upload"


def encode_paths(paths: Iterable[str | Path], value_type: FlagType) -> str:
    """Encode stored paths as the value of a flag of *value_type*.

    List types get a CSV record of every path in upload order; scalar types
    get the first path.
    """
    values = [str(p) for p in paths]
    if value_type.is_list:
        return format_list(values)
    return values[0] if values else ""


class UploadStore:
    """Directory holding every file uploaded during the server's lifetime.

    Args:
        directory: Where to store uploads. When ``None`` a fresh temporary
            directory is created and :meth:`cleanup` removes it again.
    """

    def __init__(self, directory: Optional[str | Path] = None) -> None:
        if directory is None:
            self.root = Path(tempfile.mkdtemp(prefix="cliweb-"))
            self._owned = True
        else:
            self.root = Path(directory)
            try:
                self.root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise UploadError(f"Cannot create upload directory {self.root}: {exc}") from exc
            self._owned = False

    def save(self, filename: Optional[str], stream: BinaryIO) -> Path:
        """Copy *stream* to a new unique path and return that path.

        Every upload gets its own sub-directory so the original (sanitized)
        file name is kept without colliding with earlier uploads.

        Raises:
            UploadError: If the file cannot be written.
        """
        try:
            target_dir = Path(tempfile.mkdtemp(dir=self.root))
            target = target_dir / sanitize_filename(filename)
            with target.open("wb") as fh:
                shutil.copyfileobj(stream, fh)
        except OSError as exc:
            raise UploadError(f"Failed storing upload {filename!r}: {exc}") from exc
        logger.debug("Stored upload %r at %s", filename, target)
        return target

    def store(
        self,
        flag_name: str,
        value_type: str,
        files: Iterable[tuple[Optional[str], BinaryIO]],
    ) -> str:
        """Save the files uploaded for one flag and return its new value.

        Args:
            flag_name: Flag the files are for (used in messages only).
            value_type: The flag's declared type as sent by the page.
            files: ``(filename, stream)`` pairs in upload order.

        Raises:
            UploadError: For an unknown type, no files, or an I/O error.
        """
        try:
            flag_type = FlagType(value_type)
        except ValueError as exc:
            raise UploadError(f"Unknown flag type {value_type!r} for --{flag_name}") from exc

        files = list(files)
        if not files:
            raise UploadError(f"No file uploaded for --{flag_name}")
        if not flag_type.is_list:
            files = files[:1]

        paths = [self.save(filename, stream) for filename, stream in files]
        logger.info("Uploaded %d file(s) for --%s", len(paths), flag_name)
        return encode_paths(paths, flag_type)

    def cleanup(self) -> None:
        """Remove the directory if this store created it."""
        if self._owned and self.root.exists():
            shutil.rmtree(self.root, ignore_errors=True)
            logger.debug("Removed upload directory %s", self.root)
