#!/usr/bin/env python3
"""
extractor.py

Stream every entry of a quiz package archive onto disk.

Package editors store entry names URI-encoded ("Images/%D0%B0.jpg") and
older ones write them in the DOS Cyrillic codepage without setting the
zip UTF-8 flag. Both are decoded before paths are joined.

Entries are written by a small thread pool. Creating a destination
directory and writing a file into it happen under one lock per
directory, so two entries never race on the same mkdir.
"""

from __future__ import annotations

import shutil
import threading
import zipfile
import zlib
from concurrent.futures import ThreadPoolExecutor, Future
from pathlib import Path
from typing import Dict, List
from urllib.parse import unquote

from siqpack.errors import ExtractionError
from siqpack.icons import log_warning
from siqpack.path_utils import is_safe_path


UTF8_FLAG = 0x800


def decode_entry_name(info: zipfile.ZipInfo, legacy_encoding: str = "cp866") -> str:
    """
    Recover the real name of an archive entry.

    zipfile decodes names without the UTF-8 flag as cp437; re-encoding
    gives back the raw bytes, which are then read with the legacy codepage.
    """
    name = info.filename
    if not info.flag_bits & UTF8_FLAG:
        try:
            name = name.encode("cp437").decode(legacy_encoding)
        except (UnicodeEncodeError, UnicodeDecodeError):
            pass  # not a cp437 round-trip; keep zipfile's decoding
    return unquote(name)


class DirectoryLocks:
    """Hands out one lock per destination directory"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Path, threading.Lock] = {}

    def for_dir(self, directory: Path) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(directory)
            if lock is None:
                lock = self._locks[directory] = threading.Lock()
            return lock


class PackageExtractor:
    """Extract a package archive into a working directory"""

    def __init__(self, legacy_encoding: str = "cp866", workers: int = 4, verbose: bool = True):
        self.legacy_encoding = legacy_encoding
        self.workers = workers
        self.verbose = verbose
        self._locks = DirectoryLocks()
        self._local = threading.local()
        self._handles: List[zipfile.ZipFile] = []
        self._handles_guard = threading.Lock()

    def extract(self, archive_path: Path, dest_dir: Path) -> List[Path]:
        """
        Extract all entries of archive_path below dest_dir.

        Returns:
            Paths of the files written, in archive order

        Raises:
            ExtractionError: Archive unreadable or an entry failed to write
        """
        dest_dir.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(archive_path) as zf:
                return self._extract_all(zf, archive_path, dest_dir)
        except zipfile.BadZipFile as e:
            raise ExtractionError(
                message=f"Not a readable zip archive: {archive_path.name}",
                suggestion="Re-download the package or re-save it from the editor",
                context={"archive": str(archive_path)},
                cause=e,
            )
        except (OSError, zlib.error, NotImplementedError) as e:
            # corrupt deflate data, or a compression method zipfile cannot read
            raise ExtractionError(
                message=f"Failed to extract {archive_path.name}",
                suggestion="The archive is damaged or uses an unsupported compression method",
                context={"archive": str(archive_path), "work_dir": str(dest_dir)},
                cause=e,
            )

    def _extract_all(self, zf: zipfile.ZipFile, archive_path: Path, dest_dir: Path) -> List[Path]:
        jobs = []
        for info in zf.infolist():
            name = decode_entry_name(info, self.legacy_encoding)
            target = dest_dir / name
            if not is_safe_path(dest_dir, target):
                print(log_warning(f"Skipping entry outside package: {name}", prefix="extract:warn"))
                continue
            if info.is_dir() or name.endswith("/"):
                target.mkdir(parents=True, exist_ok=True)
                continue
            jobs.append((info, name, target))

        executor = ThreadPoolExecutor(max_workers=self.workers)
        futures: List[Future] = []
        try:
            for info, name, target in jobs:
                futures.append(executor.submit(self._write_entry, archive_path, info, name, target))
            written = [f.result() for f in futures]
        except BaseException:
            # Ctrl+C or a failed entry: drop queued work, let running writes finish
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            self._close_handles()
        executor.shutdown(wait=True)
        return written

    def _thread_zip(self, archive_path: Path) -> zipfile.ZipFile:
        # ZipFile handles are not shared between worker threads
        zf = getattr(self._local, "zf", None)
        if zf is None:
            zf = self._local.zf = zipfile.ZipFile(archive_path)
            with self._handles_guard:
                self._handles.append(zf)
        return zf

    def _close_handles(self):
        with self._handles_guard:
            for zf in self._handles:
                zf.close()
            self._handles.clear()
        self._local = threading.local()

    def _write_entry(self, archive_path: Path, info: zipfile.ZipInfo, name: str, target: Path) -> Path:
        directory = target.parent
        with self._locks.for_dir(directory):
            directory.mkdir(parents=True, exist_ok=True)
            with self._thread_zip(archive_path).open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
        if self.verbose:
            print(f"[extract] {name}")
        return target


def extract_package(
    archive_path: Path,
    dest_dir: Path,
    legacy_encoding: str = "cp866",
    workers: int = 4,
) -> List[Path]:
    """Convenience wrapper around PackageExtractor."""
    return PackageExtractor(legacy_encoding=legacy_encoding, workers=workers).extract(archive_path, dest_dir)
