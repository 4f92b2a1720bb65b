"""Per-run context.

Each pipeline run gets its own identifier and its own checkout and bundle
directories, so concurrent runs of the same repository never share paths.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from vitessg.core.errors import InputValidationError


def repo_name_from_url(repo_url: str) -> str:
    """Derive a directory-safe repository name from a clone URL.

    "https://github.com/acme/site.git" -> "site"
    "git@github.com:acme/site.git" -> "site"
    """
    tail = repo_url.strip().rstrip("/").rsplit(":", 1)[-1]
    name = PurePosixPath(tail).name
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name or name in {".", ".."}:
        raise InputValidationError(f"Cannot derive repository name from {repo_url!r}")
    return name


@dataclass(frozen=True)
class RunContext:
    """Identifiers and working paths for one pipeline run."""

    run_id: str
    repo_url: str
    routes: tuple[str, ...]
    repo_dir: Path
    out_dir: Path
    dist_dir: Path

    @classmethod
    def create(
        cls,
        repo_url: str,
        routes: list[str],
        *,
        repos_dir: Path,
        out_root: Path,
        dist_dir_name: str = "dist",
        run_id: str | None = None,
    ) -> RunContext:
        """Create a context with a fresh run id.

        Args:
            repo_url: Repository to clone
            routes: Validated routes to render
            repos_dir: Parent directory for checkouts
            out_root: Parent directory for bundles
            dist_dir_name: Build output directory inside the checkout
            run_id: Explicit run id (generated when omitted)

        Returns:
            RunContext instance
        """
        run_id = run_id or uuid.uuid4().hex
        slug = f"{repo_name_from_url(repo_url)}-{run_id}"
        repo_dir = repos_dir / slug
        return cls(
            run_id=run_id,
            repo_url=repo_url,
            routes=tuple(routes),
            repo_dir=repo_dir,
            out_dir=out_root / slug,
            dist_dir=repo_dir / dist_dir_name,
        )
