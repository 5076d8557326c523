"""
Console Reporter

Formats engine snapshots for the terminal with ANSI colors.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from platform_sim.domain.models import (
    GlobalMetrics,
    IssueSummary,
    PlatformState,
    ScenarioProgress,
    SecRelCheckpoint,
    SimulationState,
    Scenario,
)


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


class ConsoleReporter:
    """Prints scoring, checkpoint and hierarchy reports."""
    Colors = Colors

    def __init__(self, use_color: bool = True):
        self.use_color = use_color

    def colored(self, text: str, color: str, bold: bool = False) -> str:
        if not self.use_color:
            return text
        style = Colors.BOLD if bold else ""
        return f"{style}{color}{text}{Colors.RESET}"

    @staticmethod
    def severity_color(severity: str) -> str:
        return {
            "critical": Colors.RED,
            "high": Colors.YELLOW,
            "medium": Colors.BLUE,
            "low": Colors.GRAY,
        }.get(str(severity).lower(), Colors.RESET)

    @staticmethod
    def score_color(value: float, inverse: bool = False) -> str:
        """Green for good, yellow for fair, red for poor (inverse for debt-like metrics)."""
        if inverse:
            value = 100 - value
        if value >= 80:
            return Colors.GREEN
        if value >= 60:
            return Colors.YELLOW
        return Colors.RED

    def print_header(self, title: str, char: str = "=", width: int = 78) -> None:
        print(f"\n{self.colored(char * width, Colors.CYAN)}")
        print(f"{self.colored(f' {title} '.center(width), Colors.CYAN, bold=True)}")
        print(f"{self.colored(char * width, Colors.CYAN)}")

    def print_subheader(self, title: str, char: str = "-", width: int = 78) -> None:
        print(f"\n{self.colored(f' {title} ', Colors.WHITE, bold=True)}")
        print(f"{self.colored(char * width, Colors.GRAY)}")

    # --- Scoring ---

    def display_metrics(self, metrics: GlobalMetrics) -> None:
        self.print_subheader("Global Metrics")
        rows = [
            ("User Satisfaction", metrics.user_satisfaction, False, "%"),
            ("Developer Velocity", metrics.developer_velocity, False, "%"),
            ("Security Score", metrics.security_score, False, "%"),
            ("Performance Score", metrics.performance_score, False, "%"),
            ("Technical Debt", metrics.technical_debt, True, "%"),
            ("Adoption Rate", metrics.adoption_rate, False, "%"),
        ]
        for label, value, inverse, unit in rows:
            color = self.score_color(value, inverse)
            print(f"  {label + ':':<22} {self.colored(f'{value}{unit}', color)}")
        print(f"  {'Total Cost:':<22} ${metrics.total_cost:,}/mo")
        print(f"  {'Time to Market:':<22} {metrics.time_to_market} days")

    def display_state(self, state: SimulationState) -> None:
        self.print_header("Platform Simulation")
        print(f"\n  Components:          {len(state.components)}")
        print(f"  Active Issues:       {len(state.issues)}")
        print(f"  Elapsed:             {state.total_time:.2f} days")

        if state.components:
            self.print_subheader("Components")
            print(f"\n  {'Component':<28} {'Type':<14} {'Perf':<6} {'Sec':<6} {'Rel':<6} {'Cost':<8}")
            print(f"  {'-' * 70}")
            for c in state.components:
                m = c.metrics
                print(
                    f"  {c.name[:27]:<28} {c.type.value:<14} "
                    f"{m.performance:<6} {m.security:<6} {m.reliability:<6} {m.cost:<8}"
                )

        self.display_metrics(state.metrics)

        if state.issues:
            self.print_subheader("Issues")
            for issue in sorted(state.issues, key=lambda i: -i.severity.priority):
                sev = issue.severity.value
                print(
                    f"  [{self.colored(sev.upper(), self.severity_color(sev))}] "
                    f"{issue.title} ({issue.component}, {issue.time_to_resolve}h)"
                )

    def display_issue_summary(self, summary: IssueSummary) -> None:
        self.print_subheader("Issue Summary")
        print(f"  {'Total:':<22} {summary.total_issues}")
        for severity, count in summary.by_severity.items():
            print(f"  {severity.capitalize() + ':':<22} {self.colored(str(count), self.severity_color(severity))}")
        print(f"  {'Affected Components:':<22} {summary.affected_components}")
        print(f"  {'Resolution Effort:':<22} {summary.total_resolution_hours}h")
        print(f"  {'Resolution Cost:':<22} ${summary.total_resolution_cost:,.0f}")

    def display_checkpoints(self, checkpoints: Iterable[SecRelCheckpoint], pass_rate: float) -> None:
        self.print_header("SecRel Pipeline")
        color = Colors.GREEN if pass_rate >= 90 else (Colors.YELLOW if pass_rate >= 70 else Colors.RED)
        print(f"\n  Pass Rate:           {self.colored(f'{pass_rate:.0f}%', color)}")
        print(f"\n  {'Checkpoint':<48} {'Result':<8}")
        print(f"  {'-' * 58}")
        for cp in checkpoints:
            result = self.colored("Pass", Colors.GREEN) if cp.passed else self.colored("Fail", Colors.RED)
            print(f"  {cp.name[:47]:<48} {result}")

    # --- Scenarios ---

    def display_scenarios(self, scenarios: Iterable[Scenario]) -> None:
        self.print_header("Scenarios")
        print(f"\n  {'Id':<22} {'Difficulty':<14} {'Budget':<10} {'Title'}")
        print(f"  {'-' * 76}")
        for s in scenarios:
            budget = f"${s.budget:,.0f}" if s.budget is not None else "-"
            print(f"  {s.id:<22} {s.difficulty.value:<14} {budget:<10} {s.title}")

    def display_progress(self, progress: ScenarioProgress) -> None:
        self.print_subheader(f"Objectives: {progress.scenario_id}")
        for r in progress.results:
            mark = self.colored("met", Colors.GREEN) if r.met else self.colored("open", Colors.RED)
            print(f"  {r.objective_id:<28} {r.metric:<20} {r.actual:>8} / {r.target:<8} {mark}")
        budget = self.colored("yes", Colors.GREEN) if progress.within_budget else self.colored("no", Colors.RED)
        print(f"\n  {'Score:':<22} {progress.score}%")
        print(f"  {'Within Budget:':<22} {budget}")

    # --- Hierarchy ---

    def display_hierarchy(self, state: PlatformState, rejected: Optional[List[str]] = None) -> None:
        self.print_header("Platform Hierarchy")
        children: Dict[Optional[str], List[str]] = {}
        for node_id, node in state.nodes.items():
            children.setdefault(node.parent_id, []).append(node_id)

        def walk(node_id: str, depth: int) -> None:
            node = state.nodes[node_id]
            usage = ""
            if node.resources is not None and node.resources.cpu:
                usage = f"  cpu {node.resources.allocated_cpu:g}/{node.resources.cpu:g}"
            print(f"  {'  ' * depth}- {node.name} [{node.type.value}]{usage}")
            for child_id in node.child_ids:
                if child_id in state.nodes:
                    walk(child_id, depth + 1)

        print()
        for root_id in children.get(None, []):
            walk(root_id, 0)

        if state.deployments:
            self.print_subheader("Deployments")
            for d in state.deployments:
                print(f"  {d.id:<20} {d.application_id} -> {d.target_id} ({d.status.value}, x{d.replicas})")

        gm = state.global_metrics
        self.print_subheader("Platform Metrics")
        print(f"  {'Total Cost:':<24} ${gm.total_cost:,}/mo")
        print(f"  {'Applications:':<24} {gm.application_count}")
        print(f"  {'Service Health:':<24} {gm.service_health}%")
        print(f"  {'Platform Maturity:':<24} {gm.platform_maturity}%")
        print(f"  {'Operational Excellence:':<24} {gm.operational_excellence}%")

        if rejected:
            self.print_subheader("Rejected")
            for line in rejected:
                print(f"  {self.colored(line, Colors.RED)}")
