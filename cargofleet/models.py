"""Core data models shared across cargofleet components."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set


@dataclass
class ManifestRecord:
    """Parsed view of a single Cargo.toml."""

    path: Path
    name: Optional[str]
    dependency_count: int
    workspace_members: Optional[List[str]] = None
    has_workspace: bool = False


@dataclass
class Project:
    """A discovered Cargo project keyed by its absolute directory path."""

    name: str
    path: str
    target_size: int
    dep_count: int
    last_modified: int
    is_workspace_member: bool
    workspace_root: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WorkspaceGraph:
    """Workspace roots mapped to their resolved member directories."""

    roots: Dict[Path, Set[Path]] = field(default_factory=dict)

    @property
    def members(self) -> Set[Path]:
        union: Set[Path] = set()
        for members in self.roots.values():
            union.update(members)
        return union

    def is_member(self, path: Path) -> bool:
        return any(path in members for members in self.roots.values())


@dataclass
class VersionUsage:
    version: str
    projects: List[str] = field(default_factory=list)


@dataclass
class DependencyUsage:
    """All versions of one dependency seen across a project set."""

    name: str
    versions: List[VersionUsage] = field(default_factory=list)

    @property
    def project_count(self) -> int:
        return sum(len(usage.projects) for usage in self.versions)

    @property
    def has_mismatch(self) -> bool:
        return len(self.versions) > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "versions": [asdict(usage) for usage in self.versions],
            "project_count": self.project_count,
        }


@dataclass
class DependencyAnalysis:
    dependencies: List[DependencyUsage] = field(default_factory=list)

    @property
    def total_unique_deps(self) -> int:
        return len(self.dependencies)

    @property
    def deps_with_mismatches(self) -> int:
        return sum(1 for dep in self.dependencies if dep.has_mismatch)

    def get(self, name: str) -> Optional[DependencyUsage]:
        for dep in self.dependencies:
            if dep.name == name:
                return dep
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "total_unique_deps": self.total_unique_deps,
            "deps_with_mismatches": self.deps_with_mismatches,
        }


@dataclass
class ToolchainInfo:
    """Pinned toolchain and MSRV declared by one project."""

    project_path: str
    project_name: str
    toolchain: Optional[str] = None
    msrv: Optional[str] = None
    channel: Optional[str] = None


@dataclass
class ToolchainGroup:
    version: str
    projects: List[str] = field(default_factory=list)


@dataclass
class ToolchainAnalysis:
    projects: List[ToolchainInfo] = field(default_factory=list)
    toolchain_groups: List[ToolchainGroup] = field(default_factory=list)
    msrv_groups: List[ToolchainGroup] = field(default_factory=list)

    @property
    def has_mismatches(self) -> bool:
        return len(self.toolchain_groups) > 1 or len(self.msrv_groups) > 1

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["has_mismatches"] = self.has_mismatches
        return data


@dataclass
class LicenseInfo:
    name: str
    version: str
    license: str
    authors: Optional[str] = None
    repository: Optional[str] = None


@dataclass
class LicenseResult:
    """License report for a single project, or the reason it is missing."""

    project_path: str
    project_name: str
    licenses: List[LicenseInfo] = field(default_factory=list)
    success: bool = True
    error: Optional[str] = None


@dataclass
class LicenseGroup:
    license: str
    packages: List[str] = field(default_factory=list)
    is_problematic: bool = False


@dataclass
class LicenseAnalysis:
    projects: List[LicenseResult] = field(default_factory=list)
    license_groups: List[LicenseGroup] = field(default_factory=list)

    @property
    def total_packages(self) -> int:
        return sum(len(group.packages) for group in self.license_groups)

    @property
    def problematic_count(self) -> int:
        return sum(len(group.packages) for group in self.license_groups if group.is_problematic)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_packages"] = self.total_packages
        data["problematic_count"] = self.problematic_count
        return data


@dataclass
class ProcessInvocation:
    """A single external tool call: subcommand, arguments and working directory."""

    command: str
    args: List[str] = field(default_factory=list)
    cwd: str = "."


@dataclass
class CommandResult:
    """Outcome of a batch invocation."""

    project_path: str
    command: str
    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None
    spawn_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class OutputEvent:
    line: str
    stream: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CompletionEvent:
    project_path: str
    command: str
    success: bool
    exit_code: Optional[int]
    output: List[str]
    duration_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CleanResult:
    path: str
    name: str
    freed_bytes: int = 0
    success: bool = True
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WorkspaceMember:
    name: str
    path: str
    is_current: bool = False


@dataclass
class WorkspaceInfo:
    """Workspace relationship of one project directory."""

    is_workspace: bool = False
    members: List[WorkspaceMember] = field(default_factory=list)
    root_path: Optional[str] = None
    is_member_of_workspace: bool = False
    parent_workspace_path: Optional[str] = None
    parent_workspace_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
