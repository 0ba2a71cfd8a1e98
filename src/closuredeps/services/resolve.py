"""ResolveService: dependency-first file lists for compilation.

Every operation runs under the workspace lock so that building the graph
and querying it happen as one unit. Graph exceptions are translated into
``ServiceResult`` errors; load issues from the scan surface as warnings,
or as an ``INVALID_GRAPH`` failure in strict mode.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from closuredeps.domain.graph import CycleDetectedError, UnknownPackageError
from closuredeps.infrastructure.filesystem import concat_sources
from closuredeps.services.base import BaseService
from closuredeps.services.result import ServiceResult

if TYPE_CHECKING:
    from closuredeps.domain.graph import Node
    from closuredeps.infrastructure.workspace import LoadIssue

log = structlog.get_logger(__name__)


def _invalid_graph(op: str, issues: list[LoadIssue]) -> ServiceResult:
    return ServiceResult.failure(
        op,
        "INVALID_GRAPH",
        f"Dependency graph has {len(issues)} load issue(s)",
        issues=[issue.to_dict() for issue in issues],
    )


class ResolveService(BaseService):
    """Resolves entry packages into ordered source files."""

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _file_list(self, nodes: list[Node]) -> list[str]:
        """Ordered file paths for *nodes*, optionally collapsing shared files.

        Several packages may be provided by one file; the compiler must see
        that file once, at the position of its first package.
        """
        paths = [str(node.path) for node in nodes]
        if self._workspace.settings.resolve.dedupe_paths:
            paths = list(dict.fromkeys(paths))
        return paths

    @staticmethod
    def _items(nodes: list[Node]) -> list[dict[str, Any]]:
        return [{"name": node.name, "path": str(node.path)} for node in nodes]

    def _resolve(self, op: str, entries: list[str]) -> ServiceResult:
        if not entries:
            return ServiceResult.failure(
                op, "NO_ENTRIES", "At least one entry package is required"
            )

        with self._workspace.lock:
            graph = self._workspace.graph
            issues = self._workspace.issues
            if issues and self._workspace.settings.strict_mode:
                return _invalid_graph(op, issues)
            warnings = self._issue_warnings()
            try:
                nodes = graph.get_dependencies(entries)
            except (UnknownPackageError, CycleDetectedError) as exc:
                return self._dependency_failure(op, exc, warnings=warnings)

        files = self._file_list(nodes)
        log.debug("resolve.complete", entries=entries, packages=len(nodes), files=len(files))
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "entries": entries,
                "count": len(nodes),
                "items": self._items(nodes),
                "files": files,
            },
            warnings=warnings,
            meta={"root": str(self._workspace.root)},
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def resolve(self, entries: list[str]) -> ServiceResult:
        """Ordered, deduplicated file list for the closure of *entries*."""
        with self._operation("resolve"):
            return self._resolve("resolve", list(entries))

    def resolve_file(self, path: str | Path) -> ServiceResult:
        """Resolve using the packages a source file provides as entries."""
        op = "resolve_file"
        with self._operation(op):
            try:
                source = self._workspace.source_path(path)
            except ValueError as exc:
                return ServiceResult.failure(op, "NOT_FOUND", str(exc), path=str(path))
            if not source.is_file():
                return ServiceResult.failure(
                    op, "NOT_FOUND", f"Source file not found: {path}", path=str(path)
                )

            try:
                decls = self._workspace.declarations_for(source)
            except (OSError, UnicodeDecodeError) as exc:
                return ServiceResult.failure(
                    op, "IO_ERROR", f"Cannot read {source}: {exc}", path=str(source)
                )
            if not decls.is_package:
                return ServiceResult.failure(
                    op, "NOT_FOUND", f"No goog.provide declaration in {path}", path=str(source)
                )
            return self._resolve(op, list(decls.provides))

    def dependencies(self, package: str) -> ServiceResult:
        """Closure of a single package; an unknown package yields no items."""
        op = "dependencies"
        with self._operation(op):
            with self._workspace.lock:
                graph = self._workspace.graph
                warnings = self._issue_warnings()
                nodes = graph.get_dependencies_of_package(package)
                known = package in graph

            if not known:
                log.debug("dependencies.unknown", package=package)
                warnings.append(f"Package not registered: {package}")
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "package": package,
                    "count": len(nodes),
                    "items": self._items(nodes),
                    "files": self._file_list(nodes),
                },
                warnings=warnings,
            )

    def packages(self) -> ServiceResult:
        """Every registered package with its file and direct requirements."""
        with self._operation("packages"), self._workspace.lock:
            graph = self._workspace.graph
            items = [
                {
                    "name": name,
                    "path": str(graph.get(name).path),  # type: ignore[union-attr]
                    "requires": [dep.name for dep in graph.dependencies_of(name)],
                }
                for name in sorted(graph)
            ]
            warnings = self._issue_warnings()

        return ServiceResult(
            ok=True,
            op="packages",
            data={"count": len(items), "items": items},
            warnings=warnings,
        )

    def check(self) -> ServiceResult:
        """Rescan the source tree and report every load issue."""
        op = "check"
        with self._operation(op):
            with self._workspace.lock:
                self._workspace.invalidate()
                graph = self._workspace.graph
                issues = self._workspace.issues

            log.debug("check.complete", packages=len(graph), issues=len(issues))
            if issues:
                return _invalid_graph(op, issues)
            return ServiceResult(
                ok=True,
                op=op,
                data={"packages": len(graph), "edges": graph.edge_count()},
            )

    def bundle(self, entries: list[str], *, output: str | Path | None = None) -> ServiceResult:
        """Concatenate the resolved files, writing to *output* if given."""
        op = "bundle"
        with self._operation(op):
            resolved = self._resolve(op, list(entries))
            if not resolved.ok:
                return resolved
            return self._write_bundle(resolved, output)

    def _write_bundle(self, resolved: ServiceResult, output: str | Path | None) -> ServiceResult:
        op = resolved.op
        files = resolved.data["files"]
        separator = self._workspace.settings.bundle.separator
        try:
            content = concat_sources((Path(f) for f in files), separator=separator)
            data: dict[str, Any] = {"files": files, "count": len(files)}
            if output is not None:
                out = Path(output)
                out.parent.mkdir(parents=True, exist_ok=True)
                out.write_text(content, encoding="utf-8")
                data["output"] = str(out)
                data["bytes"] = len(content.encode("utf-8"))
            else:
                data["content"] = content
        except OSError as exc:
            return ServiceResult.failure(
                op, "IO_ERROR", str(exc), warnings=resolved.warnings, path=exc.filename
            )
        except UnicodeDecodeError as exc:
            return ServiceResult.failure(
                op, "IO_ERROR", f"Source is not valid UTF-8: {exc}", warnings=resolved.warnings
            )

        log.debug("bundle.complete", files=len(files), output=data.get("output"))
        return ServiceResult(ok=True, op=op, data=data, warnings=resolved.warnings)
