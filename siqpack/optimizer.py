#!/usr/bin/env python3
"""
optimizer.py

Recompress image assets in place.

Raster images are re-encoded with Pillow (JPEG at a configurable quality,
PNG/GIF with the encoder's optimize pass); SVG files are re-serialized by
lxml without comments, metadata and insignificant whitespace. A result is
only kept when it is smaller than the original.

Files are independent, so they are processed by a thread pool; the call
returns only once every file is done or has failed.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from lxml import etree
from PIL import Image, UnidentifiedImageError

from siqpack.errors import OptimizationError
from siqpack.icons import ASSET, SKIP


JPEG_SUFFIXES = {".jpg", ".jpeg"}
PNG_SUFFIXES = {".png"}
GIF_SUFFIXES = {".gif"}
SVG_SUFFIXES = {".svg"}
SUPPORTED_SUFFIXES = JPEG_SUFFIXES | PNG_SUFFIXES | GIF_SUFFIXES | SVG_SUFFIXES

SVG_DROP_TAGS = {"metadata", "title", "desc"}


@dataclass
class AssetResult:
    """Outcome for one file"""
    path: Path
    size_before: int
    size_after: int
    replaced: bool

    @property
    def saved(self) -> int:
        return self.size_before - self.size_after


@dataclass
class OptimizationSummary:
    results: List[AssetResult] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)

    @property
    def bytes_saved(self) -> int:
        return sum(r.saved for r in self.results)

    @property
    def replaced_count(self) -> int:
        return sum(1 for r in self.results if r.replaced)


def _temp_path(path: Path) -> Path:
    return path.with_name(f".{path.name}.opt")


def _keep_if_smaller(path: Path, candidate: Path, size_before: int) -> AssetResult:
    size_after = candidate.stat().st_size
    if size_after < size_before:
        os.replace(candidate, path)
        return AssetResult(path, size_before, size_after, True)
    candidate.unlink()
    return AssetResult(path, size_before, size_before, False)


def optimize_raster(path: Path, jpeg_quality: int = 85) -> AssetResult:
    size_before = path.stat().st_size
    candidate = _temp_path(path)
    suffix = path.suffix.lower()

    try:
        with Image.open(path) as image:
            image.load()
            if suffix in JPEG_SUFFIXES:
                if image.mode not in ("RGB", "L", "CMYK"):
                    image = image.convert("RGB")
                image.save(candidate, format="JPEG", quality=jpeg_quality, optimize=True, progressive=True)
            elif suffix in PNG_SUFFIXES:
                image.save(candidate, format="PNG", optimize=True)
            else:
                image.save(candidate, format="GIF", optimize=True, save_all=getattr(image, "is_animated", False))
    except BaseException:
        candidate.unlink(missing_ok=True)
        raise

    return _keep_if_smaller(path, candidate, size_before)


def optimize_svg(path: Path) -> AssetResult:
    size_before = path.stat().st_size
    parser = etree.XMLParser(
        remove_blank_text=True,
        remove_comments=True,
        resolve_entities=False,
        no_network=True,
    )
    tree = etree.parse(str(path), parser)
    for el in list(tree.iter()):
        if isinstance(el.tag, str) and etree.QName(el).localname in SVG_DROP_TAGS:
            el.getparent().remove(el)

    candidate = _temp_path(path)
    tree.write(str(candidate), xml_declaration=False, encoding="utf-8")
    return _keep_if_smaller(path, candidate, size_before)


class AssetOptimizer:
    """Optimize every supported image below a folder"""

    def __init__(self, workers: int = 4, jpeg_quality: int = 85):
        self.workers = workers
        self.jpeg_quality = jpeg_quality

    def optimize_file(self, path: Path) -> AssetResult:
        if path.suffix.lower() in SVG_SUFFIXES:
            return optimize_svg(path)
        return optimize_raster(path, self.jpeg_quality)

    def optimize_dir(self, root: Path) -> OptimizationSummary:
        """
        Optimize all images below root, in parallel.

        Raises:
            OptimizationError: One or more files failed; raised after
                every other file has been processed
        """
        summary = OptimizationSummary()
        if not root.is_dir():
            print(f"[optimize] {SKIP} No {root.name}/ folder, nothing to optimize")
            return summary

        files = sorted(p for p in root.rglob("*") if p.is_file())
        targets = []
        for path in files:
            if path.suffix.lower() in SUPPORTED_SUFFIXES:
                targets.append(path)
            else:
                summary.skipped.append(path)

        print(f"[optimize] {ASSET} {len(targets)} image(s) in {root.name}/")

        failures: Dict[Path, Exception] = {}
        executor = ThreadPoolExecutor(max_workers=self.workers)
        futures: Dict[Future, Path] = {}
        try:
            for path in targets:
                futures[executor.submit(self.optimize_file, path)] = path
            for future, path in futures.items():
                try:
                    summary.results.append(future.result())
                except (
                    OSError,
                    UnidentifiedImageError,
                    Image.DecompressionBombError,
                    etree.XMLSyntaxError,
                    ValueError,
                ) as e:
                    failures[path] = e
        except BaseException:
            executor.shutdown(wait=True, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        if failures:
            first_path, first_error = next(iter(failures.items()))
            raise OptimizationError(
                message=f"{len(failures)} image(s) could not be optimized",
                suggestion=(
                    "The working directory was kept for inspection.\n"
                    "  Replace or remove the broken file(s) and run again."
                ),
                context={
                    "failed": [str(p.relative_to(root)) for p in failures],
                    "first_failure": str(first_path),
                },
                cause=first_error,
            )
        return summary


def optimize_images(root: Path, workers: int = 4, jpeg_quality: int = 85) -> OptimizationSummary:
    """Convenience wrapper around AssetOptimizer."""
    return AssetOptimizer(workers=workers, jpeg_quality=jpeg_quality).optimize_dir(root)

