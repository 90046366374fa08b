"""Cross-project aggregation of dependency, toolchain and license metadata."""

from .dependencies import analyze_dependencies
from .licenses import aggregate_licenses, check_all_licenses, is_problematic_license
from .toolchains import analyze_toolchains

__all__ = [
    "aggregate_licenses",
    "analyze_dependencies",
    "analyze_toolchains",
    "check_all_licenses",
    "is_problematic_license",
]
