#!/usr/bin/env python3
"""
# siqpack
# Licensed under the MIT License. See LICENSE in the project root.

pipeline.py

Repackage a quiz package: normalize its descriptor to JSON, shrink its
images and write a new, smaller archive next to the original.

Stages run strictly in this order, each one only after the previous
stage's files are on disk:

    extracting    unzip into <name>-temp/
    parsing       read content.xml
    normalizing   build the Package model
    serializing   write content.json
    optimizing    recompress Images/
    pruning       drop content.xml, the manifest and Texts/
    archiving     zip into <name>-optimized.siq
    reporting     compare sizes
    cleaning      remove <name>-temp/

Any failure stops the run where it happened. The working directory is
only removed by the cleaning stage, so a failed run always leaves it
behind for inspection.

Usage:
    from siqpack.pipeline import run
    report = run("quiz.siq")
    print(report.summary())
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from siqpack.archiver import build_archive
from siqpack.config_utils import RunConfig, SiqpackConfig, get_config, make_run_config
from siqpack.descriptor import RawElement, parse_descriptor
from siqpack.errors import ExtractionError, descriptor_not_found_error
from siqpack.extractor import PackageExtractor
from siqpack.icons import (
    DELETE,
    ERROR,
    FILE,
    PACKAGE,
    QUIZ,
    SUCCESS,
    SWEEP,
    WORKING,
    format_size,
    log,
    log_success,
    log_warning,
)
from siqpack.models import Package
from siqpack.normalizer import WarningHandler, normalize
from siqpack.optimizer import AssetOptimizer


# ============================================================================
# States and report
# ============================================================================

class Stage(str, Enum):
    EXTRACTING = "extracting"
    PARSING = "parsing"
    NORMALIZING = "normalizing"
    SERIALIZING = "serializing"
    OPTIMIZING = "optimizing"
    PRUNING = "pruning"
    ARCHIVING = "archiving"
    REPORTING = "reporting"
    CLEANING = "cleaning"
    DONE = "done"


def compute_reduction(input_size: int, output_size: int) -> float:
    """
    Percentage saved, rounded to two decimals.

    Negative when the output grew; never clamped.
    """
    if input_size <= 0:
        return 0.0
    return round(100 - (output_size * 100 / input_size), 2)


@dataclass(frozen=True)
class SizeReport:
    input_path: Path
    output_path: Path
    input_size: int
    output_size: int

    @property
    def reduction(self) -> float:
        return compute_reduction(self.input_size, self.output_size)

    def summary(self) -> str:
        sizes = f"({format_size(self.input_size)} -> {format_size(self.output_size)})"
        if self.reduction >= 0:
            return f"Size reduced by {self.reduction:.2f}% {sizes}"
        return f"Size increased by {abs(self.reduction):.2f}% {sizes}"


# ============================================================================
# Pipeline
# ============================================================================

class RepackagePipeline:
    """Linear state machine driving one repackaging run"""

    STAGES = (
        Stage.EXTRACTING,
        Stage.PARSING,
        Stage.NORMALIZING,
        Stage.SERIALIZING,
        Stage.OPTIMIZING,
        Stage.PRUNING,
        Stage.ARCHIVING,
        Stage.REPORTING,
        Stage.CLEANING,
    )

    def __init__(
        self,
        run_config: RunConfig,
        settings: Optional[SiqpackConfig] = None,
        on_warning: Optional[WarningHandler] = None,
    ):
        self.run_config = run_config
        self.settings = settings or SiqpackConfig()
        self.on_warning = on_warning
        self.state: Optional[Stage] = None
        self.failed_stage: Optional[Stage] = None

        self.root: Optional[RawElement] = None
        self.package: Optional[Package] = None
        self.report: Optional[SizeReport] = None

    def run(self) -> SizeReport:
        """
        Drive every stage in order.

        Raises:
            SiqpackError: A stage failed; the working directory is kept
            KeyboardInterrupt: Propagated unchanged after recording the stage
        """
        rc = self.run_config
        print(f"[pipeline] {PACKAGE} {rc.package_path.name} -> {rc.output_path.name}")

        for stage in self.STAGES:
            self.state = stage
            print(f"\n[pipeline] {WORKING} {stage.value.capitalize()}...")
            handler = getattr(self, f"_{stage.value}")
            try:
                handler()
            except BaseException as e:
                self.failed_stage = stage
                kind = "Interrupted" if isinstance(e, KeyboardInterrupt) else "Failed"
                print(log(ERROR, f"{kind} while {stage.value}", prefix="pipeline"))
                if stage is not Stage.CLEANING:
                    print(f"[pipeline]   Working directory kept: {rc.work_dir}")
                raise

        self.state = Stage.DONE
        return self.report

    # ------------------------------------------------------------------
    # One handler per stage
    # ------------------------------------------------------------------

    def _extracting(self):
        rc = self.run_config
        if rc.work_dir.exists():
            print(log_warning(f"Removing stale working directory {rc.work_dir.name}/", prefix="extract:warn"))
            try:
                shutil.rmtree(rc.work_dir)
            except OSError as e:
                raise ExtractionError(
                    message=f"Cannot remove stale working directory {rc.work_dir}",
                    suggestion="Delete the folder by hand and run again",
                    context={"work_dir": str(rc.work_dir)},
                    cause=e,
                )

        extractor = PackageExtractor(
            legacy_encoding=self.settings.legacy_encoding,
            workers=self.settings.workers,
        )
        written = extractor.extract(rc.package_path, rc.work_dir)
        print(log_success(f"Unzipped {len(written)} file(s)", prefix="extract"))

    def _parsing(self):
        rc = self.run_config
        if not rc.descriptor_path.is_file():
            raise descriptor_not_found_error(rc.descriptor_path, rc.work_dir)
        self.root = parse_descriptor(rc.descriptor_path)
        print(log_success(f"Read {rc.descriptor_path.name}", prefix="parse"))

    def _normalizing(self):
        self.package = normalize(
            self.root,
            on_warning=self.on_warning,
            images_root=self.settings.images_dir,
            audio_root=self.settings.audio_dir,
            marker=self.settings.media_marker,
        )
        question_count = sum(1 for _ in self.package.iter_questions())
        print(
            f"[normalize] {QUIZ} {self.package.name}: "
            f"{len(self.package.rounds)} round(s), {question_count} question(s)"
        )

    def _serializing(self):
        path = self.run_config.normalized_path
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(self.package.to_json())
        print(f"[serialize] {FILE} Wrote {path.name}")

    def _optimizing(self):
        optimizer = AssetOptimizer(
            workers=self.settings.workers,
            jpeg_quality=self.settings.jpeg_quality,
        )
        summary = optimizer.optimize_dir(self.run_config.images_dir)
        print(
            f"[optimize] {SUCCESS} {summary.replaced_count} image(s) recompressed, "
            f"{format_size(summary.bytes_saved)} saved"
        )

    def _pruning(self):
        rc = self.run_config
        for path in (rc.descriptor_path, rc.manifest_path):
            if path.is_file():
                path.unlink()
                print(f"[prune] {DELETE} {path.name}")
        if rc.texts_dir.is_dir():
            shutil.rmtree(rc.texts_dir)
            print(f"[prune] {DELETE} {rc.texts_dir.name}/")

    def _archiving(self):
        rc = self.run_config
        count = build_archive(rc.work_dir, rc.output_path, self.settings.compress_level)
        print(f"[archive] {PACKAGE} Wrote {rc.output_path.name} ({count} file(s))")

    def _reporting(self):
        rc = self.run_config
        self.report = SizeReport(
            input_path=rc.package_path,
            output_path=rc.output_path,
            input_size=rc.package_path.stat().st_size,
            output_size=rc.output_path.stat().st_size,
        )
        print(log_success(self.report.summary(), prefix="report"))

    def _cleaning(self):
        shutil.rmtree(self.run_config.work_dir)
        print(f"[clean] {SWEEP} Removed {self.run_config.work_dir.name}/")


def run(
    archive_path: str,
    config: Optional[SiqpackConfig] = None,
    on_warning: Optional[WarningHandler] = None,
    cwd: Optional[Path] = None,
) -> SizeReport:
    """
    Repackage one quiz package.

    Args:
        archive_path: Package path, with or without the .siq extension
        config: Settings (loaded from siqpack.yaml / env when omitted)
        on_warning: Receives non-fatal normalizer warnings
        cwd: Base for relative paths (defaults to cwd)

    Raises:
        InputValidationError: Bad extension or missing file, before any work
        SiqpackError: Any later stage failure
    """
    if config is None:
        config = get_config(cwd)
    run_config = make_run_config(archive_path, config, cwd)
    return RepackagePipeline(run_config, config, on_warning).run()
