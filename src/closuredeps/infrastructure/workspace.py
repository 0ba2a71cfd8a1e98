"""Workspace: a scanned source tree and its lazily built dependency graph.

The Workspace is the single dependency injected into every service. It owns
the scan configuration and one :class:`DependencyGraph` for the source root.

Build order follows the graph's registration contract: every file is
scanned and every provided package registered *before* any edge is added,
so destructive re-registration can never discard an edge.

Unreadable files, duplicate provides and rejected edges (unknown package,
cycle) do not abort the build. They are recorded as :class:`LoadIssue`
entries and logged; services decide whether they are warnings or failures.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from closuredeps.domain.graph import CycleDetectedError, DependencyGraph, UnknownPackageError
from closuredeps.infrastructure.filesystem import (
    find_source_files,
    read_declarations,
    resolve_within,
)

if TYPE_CHECKING:
    from closuredeps.config.settings import DepsSettings
    from closuredeps.domain.declarations import Declarations

logger = logging.getLogger(__name__)

IssueKind = Literal["unreadable", "unknown_package", "cycle", "duplicate_package"]


@dataclass(frozen=True)
class LoadIssue:
    """A file or declaration the graph could not accept during a scan."""

    kind: IssueKind
    from_package: str | None
    to_package: str | None
    path: Path
    message: str

    def to_dict(self) -> dict[str, str | None]:
        return {
            "kind": self.kind,
            "from": self.from_package,
            "to": self.to_package,
            "path": str(self.path),
            "message": self.message,
        }


class Workspace:
    """Lazy-loading dependency graph for one source root.

    ``--help`` and ``--version`` never touch the filesystem: the scan runs
    on first access to :attr:`graph`. Hold :attr:`lock` around
    populate-then-query when the workspace is shared between threads.
    """

    def __init__(self, settings: DepsSettings) -> None:
        self.settings = settings
        self.root = settings.scan_root
        self.lock = threading.Lock()
        self._graph: DependencyGraph | None = None
        self._issues: list[LoadIssue] = []
        self._files: dict[Path, Declarations] = {}

    @property
    def graph(self) -> DependencyGraph:
        """The dependency graph, built from the source tree on first access."""
        if self._graph is None:
            self._graph = self._build()
        return self._graph

    @property
    def issues(self) -> list[LoadIssue]:
        """Problems found by the most recent build (triggers a build)."""
        _ = self.graph
        return list(self._issues)

    def invalidate(self) -> None:
        """Drop the cached graph, forcing a rescan on next access."""
        self._graph = None
        self._issues = []
        self._files = {}

    def declarations_for(self, path: Path) -> Declarations:
        """Declarations of a file, from the last scan when available."""
        resolved = path.resolve()
        cached = self._files.get(resolved)
        if cached is not None:
            return cached
        return read_declarations(resolved)

    def source_path(self, relative: str | Path) -> Path:
        """Resolve a path relative to the scan root (must stay inside it)."""
        return resolve_within(self.root, relative)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _build(self) -> DependencyGraph:
        scan = self.settings.scan
        graph = DependencyGraph()
        self._issues = []
        self._files = {}

        for path in find_source_files(
            self.root,
            source_suffix=scan.source_suffix,
            compiled_suffix=scan.compiled_suffix,
            skip_dirs=scan.skip_dirs,
        ):
            try:
                decls = read_declarations(path)
            except (OSError, UnicodeDecodeError) as exc:
                self._record(
                    LoadIssue(
                        kind="unreadable",
                        from_package=None,
                        to_package=None,
                        path=path.resolve(),
                        message=f"Cannot read {path}: {exc}",
                    )
                )
                continue
            if not decls.is_package:
                continue
            self._files[path.resolve()] = decls

        # Pass 1: register every provided package.
        owners: dict[str, Path] = {}
        for path, decls in self._files.items():
            for pkg in decls.provides:
                previous = owners.get(pkg)
                if previous is not None and previous != path:
                    self._record(
                        LoadIssue(
                            kind="duplicate_package",
                            from_package=pkg,
                            to_package=None,
                            path=path,
                            message=f"Package {pkg!r} also provided by {previous}; "
                            f"using {path}",
                        )
                    )
                logger.debug("Found package %s in %s", pkg, path)
                graph.register_file(pkg, path)
                owners[pkg] = path

        # Pass 2: add edges. Only the file that finally owns a package
        # contributes that package's requirements.
        for path, decls in self._files.items():
            for pkg in decls.provides:
                if owners[pkg] != path:
                    continue
                for dep in decls.requires:
                    self._add_edge(graph, pkg, dep, path)

        logger.debug(
            "Dependency graph built from %s: %d packages, %d edges, %d issues",
            self.root,
            len(graph),
            graph.edge_count(),
            len(self._issues),
        )
        return graph

    def _add_edge(self, graph: DependencyGraph, pkg: str, dep: str, path: Path) -> None:
        try:
            graph.add_dependency(pkg, dep)
        except UnknownPackageError as exc:
            self._record(
                LoadIssue(
                    kind="unknown_package",
                    from_package=pkg,
                    to_package=dep,
                    path=path,
                    message=str(exc),
                )
            )
        except CycleDetectedError as exc:
            self._record(
                LoadIssue(
                    kind="cycle",
                    from_package=pkg,
                    to_package=dep,
                    path=path,
                    message=str(exc),
                )
            )
        else:
            logger.debug("Found dependency from %s to %s", pkg, dep)

    def _record(self, issue: LoadIssue) -> None:
        logger.warning("%s", issue.message, extra={"kind": issue.kind, "path": str(issue.path)})
        self._issues.append(issue)
