"""
Display Module

Terminal display formatting and colorized output for capacity analysis
results.

Provides:
    - Colors: ANSI terminal color codes
    - Display functions for ceilings, bottlenecks, recommendations, warnings
"""

from __future__ import annotations

from typing import Dict, List, Optional

from capacity_planner.domain.models import (
    AnalysisInput,
    AnalysisResult,
    DiagnosticWarning,
    HealthStatus,
    RecommendationPriority,
    WarningLevel,
)
from capacity_planner.domain.services.parsing import format_number


# =============================================================================
# Terminal Colors
# =============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: str, bold: bool = False) -> str:
    """Apply color to text."""
    style = Colors.BOLD if bold else ""
    return f"{style}{color}{text}{Colors.RESET}"


def status_color(status: HealthStatus) -> str:
    return {
        HealthStatus.OK: Colors.GREEN,
        HealthStatus.WARNING: Colors.YELLOW,
        HealthStatus.ERROR: Colors.RED,
    }.get(status, Colors.RESET)


def level_color(level: WarningLevel) -> str:
    return {
        WarningLevel.ERROR: Colors.RED,
        WarningLevel.WARNING: Colors.YELLOW,
        WarningLevel.INFO: Colors.BLUE,
    }.get(level, Colors.RESET)


def priority_color(priority: RecommendationPriority) -> str:
    return {
        RecommendationPriority.CRITICAL: Colors.RED,
        RecommendationPriority.IMPORTANT: Colors.YELLOW,
        RecommendationPriority.OPTIONAL: Colors.GRAY,
    }.get(priority, Colors.RESET)


# =============================================================================
# Display Functions
# =============================================================================

def print_header(title: str, char: str = "=", width: int = 78) -> None:
    """Print a formatted header."""
    print(f"\n{colored(char * width, Colors.CYAN)}")
    print(f"{colored(f' {title} '.center(width), Colors.CYAN, bold=True)}")
    print(f"{colored(char * width, Colors.CYAN)}")


def print_subheader(title: str, char: str = "-", width: int = 78) -> None:
    """Print a formatted subheader."""
    print(f"\n{colored(f' {title} ', Colors.WHITE, bold=True)}")
    print(f"{colored(char * width, Colors.GRAY)}")


def _labels(snapshot: Optional[AnalysisInput]) -> Dict[str, str]:
    if snapshot is None:
        return {}
    return {n.id: n.label for n in snapshot.topology.nodes}


def display_ceilings(result: AnalysisResult, labels: Dict[str, str]) -> None:
    print_subheader("Throughput Ceilings")
    if not result.ceilings:
        print(colored("  No ceilings computed", Colors.GRAY))
        return
    statuses = result.status_map()
    for ceiling in result.ceilings:
        status = statuses.get(ceiling.node_id)
        badge = colored(f"[{status.status.value.upper():7}]", status_color(status.status)) if status else ""
        name = labels.get(ceiling.node_id, ceiling.node_id)
        print(f"  {badge} {name:<28} {format_number(ceiling.max_throughput_rps):>10} RPS"
              f"  limited by {ceiling.limiting_factor_label}")
        for detail in ceiling.details:
            print(colored(f"      {detail.label:<34} {format_number(detail.max_value):>10}   {detail.formula}",
                          Colors.GRAY))


def display_bottlenecks(result: AnalysisResult) -> None:
    print_subheader("Bottlenecks")
    if not result.bottlenecks:
        print(colored("  None: every node meets the target", Colors.GREEN))
        return
    for b in result.bottlenecks:
        print(f"  {colored(f'{b.gap_percent:+.1f}%'.rjust(8), Colors.RED, bold=True)}  {b.node_label:<28}"
              f" {b.dimension_label}: {format_number(b.current_ceiling)} < {format_number(b.target_throughput)}")


def display_recommendations(result: AnalysisResult) -> None:
    print_subheader("Recommendations")
    if not result.recommendations:
        print(colored("  No changes recommended", Colors.GREEN))
        return
    for group in result.recommendations:
        print(f"  {colored(group.node_label, Colors.WHITE, bold=True)}")
        for item in sorted(group.items, key=lambda i: -i.priority.rank):
            tag = colored(f"{item.priority.value.upper():9}", priority_color(item.priority))
            print(f"    {tag} {item.label}: {item.current_value} -> {colored(str(item.recommended_value), Colors.CYAN)}")
            print(colored(f"              {item.reason}", Colors.GRAY))


def display_warnings(warnings: List[DiagnosticWarning], title: str = "Diagnostics") -> None:
    print_subheader(title)
    if not warnings:
        print(colored("  No issues", Colors.GREEN))
        return
    for w in warnings:
        tag = colored(f"{w.level.value.upper():7}", level_color(w.level))
        print(f"  {tag} {w.code:<36} {w.node_label}")
        print(f"          {w.message}")
        print(colored(f"          -> {w.suggestion}", Colors.GRAY))


def display_analysis_result(result: AnalysisResult, snapshot: Optional[AnalysisInput] = None) -> None:
    """Print a full report of one analysis run."""
    print_header("CAPACITY ANALYSIS")
    achievable = result.is_achievable
    verdict = colored("ACHIEVABLE" if achievable else "NOT ACHIEVABLE",
                      Colors.GREEN if achievable else Colors.RED, bold=True)
    print(f"  {'Target:':<20} {format_number(result.target_throughput)} RPS")
    print(f"  {'Overall ceiling:':<20} {format_number(result.overall_ceiling)} RPS")
    print(f"  {'Verdict:':<20} {verdict}")

    labels = _labels(snapshot)
    display_ceilings(result, labels)
    display_bottlenecks(result)
    display_recommendations(result)
    display_warnings(result.warnings)
