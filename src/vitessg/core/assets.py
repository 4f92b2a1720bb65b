"""Asset classification and materialization.

Bundle structure:
    out/<repo>-<run_id>/
    ├── scripts/      # .js .mjs .cjs
    ├── css/          # .css
    ├── images/       # .png .jpg .jpeg .gif .svg .webp .ico
    ├── fonts/        # .woff .woff2 .ttf .otf .eot
    └── index.html    # one document per rendered route

Build output is flattened: nested directories are dropped and only the file
name is kept, so two files with the same name in one category collide.
"""

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from vitessg.core.errors import MaterializationError

logger = logging.getLogger(__name__)


class AssetCategory(Enum):
    """Semantic asset type with its file extensions and bundle directory."""

    SCRIPT = ("scripts", frozenset({".js", ".mjs", ".cjs"}))
    STYLESHEET = ("css", frozenset({".css"}))
    IMAGE = (
        "images",
        frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".ico"}),
    )
    FONT = ("fonts", frozenset({".woff", ".woff2", ".ttf", ".otf", ".eot"}))

    def __init__(self, directory: str, extensions: frozenset[str]) -> None:
        self.directory = directory
        self.extensions = extensions


_EXTENSION_INDEX: dict[str, AssetCategory] = {
    ext: category for category in AssetCategory for ext in category.extensions
}


def classify_asset(name: str) -> AssetCategory | None:
    """Return the category for a file name, or None if it is not an asset.

    Matching is by lowercased extension only.

    Args:
        name: File name or path

    Returns:
        AssetCategory or None for unrecognized extensions
    """
    return _EXTENSION_INDEX.get(Path(name).suffix.lower())


@dataclass
class MaterializeReport:
    """Result of copying build output into a bundle."""

    copied: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    collisions: list[Path] = field(default_factory=list)


def ensure_category_dirs(out_dir: Path) -> None:
    """Create one directory per asset category, even if it stays empty."""
    for category in AssetCategory:
        (out_dir / category.directory).mkdir(parents=True, exist_ok=True)


def materialize_assets(source_dir: Path, out_dir: Path) -> MaterializeReport:
    """Copy every classified file under source_dir into its category directory.

    Unclassified files are skipped. When two files flatten to the same
    destination the later one wins and the collision is logged.

    Args:
        source_dir: Build output root (read-only)
        out_dir: Bundle root

    Returns:
        MaterializeReport with copied, skipped and colliding paths

    Raises:
        MaterializationError: If source_dir is missing or a copy fails
    """
    if not source_dir.is_dir():
        raise MaterializationError(f"Build output directory not found: {source_dir}")

    report = MaterializeReport()
    # Maps destination -> source for collision reporting
    seen: dict[Path, Path] = {}

    try:
        ensure_category_dirs(out_dir)
        _copy_tree(source_dir, out_dir, report, seen)
    except OSError as e:
        raise MaterializationError(f"Failed to copy assets from {source_dir}: {e}") from e

    logger.info(
        f"Materialized {len(report.copied)} assets into {out_dir} "
        f"({len(report.skipped)} skipped, {len(report.collisions)} collisions)"
    )
    return report


def _copy_tree(
    directory: Path,
    out_dir: Path,
    report: MaterializeReport,
    seen: dict[Path, Path],
) -> None:
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            _copy_tree(entry, out_dir, report, seen)
            continue

        category = classify_asset(entry.name)
        if category is None:
            logger.debug(f"Skipping unclassified file {entry}")
            report.skipped.append(entry)
            continue

        destination = out_dir / category.directory / entry.name
        previous = seen.get(destination)
        if previous is not None:
            logger.warning(f"{entry} overwrites {previous} at {destination}")
            report.collisions.append(destination)

        shutil.copyfile(entry, destination)
        seen[destination] = entry
        if previous is None:
            report.copied.append(destination)
