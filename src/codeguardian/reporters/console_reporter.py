"""Rich terminal report for an analysis run."""
from collections import OrderedDict
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from codeguardian.analyzer.analysis import AnalysisResult
from codeguardian.analyzer.project_info import ProjectInfo
from codeguardian.reaper.fixer import FixOutcome
from codeguardian.utils.safe_console import SafeConsole

MAX_FILES_SHOWN = 10
MAX_HOTSPOTS_SHOWN = 5
HIGH_COMPLEXITY = 20

FRAMEWORK_LABELS = {
    'react': 'React',
    'vue': 'Vue',
    'angular': 'Angular',
    'svelte': 'Svelte',
    'nextjs': 'Next.js',
    'nuxt': 'Nuxt',
    'unknown': 'Unknown',
}


def status_style(count: int) -> str:
    if count == 0:
        return 'green'
    if count < 10:
        return 'yellow'
    return 'red'


def complexity_style(complexity: int) -> str:
    if complexity < 10:
        return 'green'
    if complexity < HIGH_COMPLEXITY:
        return 'yellow'
    return 'red'


class ConsoleReporter:
    """Print analysis and cleanup results as tables and panels."""

    def __init__(self, console: Optional[Console] = None, project_root: str | Path | None = None):
        self.console = console or SafeConsole()
        self.project_root = Path(project_root).resolve() if project_root else Path.cwd()

    def shorten_path(self, file_path: str) -> str:
        try:
            return str(Path(file_path).relative_to(self.project_root))
        except ValueError:
            return file_path

    def report(self, result: AnalysisResult, project_info: Optional[ProjectInfo] = None):
        self.console.print("\n[bold cyan]CodeGuardian Analysis Report[/bold cyan]\n")

        if project_info:
            self.report_project_info(project_info)

        self.report_summary(result)

        if result.unused_imports:
            self.report_unused_imports(result)
        if result.unused_dependencies:
            self.report_unused_dependencies(result)
        if result.complexity:
            self.report_complexity(result)

        self.report_recommendations(result)

    def report_project_info(self, info: ProjectInfo):
        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value", style="cyan")

        tests = "✓" if info.has_tests else "✗"
        if info.test_framework:
            tests += f" ({info.test_framework})"

        table.add_row("Name", escape(info.name))
        table.add_row("Version", escape(info.version))
        table.add_row("Framework", FRAMEWORK_LABELS.get(info.framework, info.framework))
        table.add_row("Build Tool", info.build_tool)
        table.add_row("Package Manager", info.package_manager)
        table.add_row("Tests", tests)

        self.console.print(Panel(table, title="Project Information", border_style="blue"))

    def report_summary(self, result: AnalysisResult):
        imports = result.total_imports
        dependencies = result.total_dependencies

        lines = [
            f"Total Files Analyzed: [cyan]{result.total_files}[/cyan]",
            f"Unused Imports: [{status_style(imports)}]{imports}[/{status_style(imports)}]",
            f"Unused Dependencies: [{status_style(dependencies)}]{dependencies}[/{status_style(dependencies)}]",
            f"Estimated Bundle Size Reduction: [green]{result.estimated_bundle_size_reduction} KB[/green]",
            f"Estimated Cleanup Time: [yellow]{result.estimated_cleanup_time} minutes[/yellow]",
        ]
        if result.skipped_files:
            lines.append(f"Skipped (unparseable): [dim]{len(result.skipped_files)}[/dim]")

        self.console.print(Panel("\n".join(lines), title="Summary", border_style="cyan"))

    def report_unused_imports(self, result: AnalysisResult):
        by_file = OrderedDict()
        for finding in result.unused_imports:
            by_file.setdefault(finding.file, []).append(finding)

        table = Table(title="Unused Imports")
        table.add_column("File", style="cyan", no_wrap=False)
        table.add_column("Line", style="green", justify="right")
        table.add_column("Import", style="red")
        table.add_column("Source", style="magenta")

        for file_path, findings in list(by_file.items())[:MAX_FILES_SHOWN]:
            for finding in findings:
                table.add_row(
                    escape(self.shorten_path(file_path)),
                    str(finding.line),
                    escape(finding.import_name),
                    escape(finding.source),
                )

        self.console.print(table)
        if len(by_file) > MAX_FILES_SHOWN:
            self.console.print(
                f"[dim]... and {len(by_file) - MAX_FILES_SHOWN} more files with unused imports[/dim]"
            )

    def report_unused_dependencies(self, result: AnalysisResult):
        for kind, title in (('dependency', 'Dependencies'), ('devDependency', 'Dev Dependencies')):
            findings = [f for f in result.unused_dependencies if f.kind == kind]
            if not findings:
                continue

            table = Table(title=f"Unused {title}")
            table.add_column("Package", style="cyan")
            table.add_column("Version", style="dim")
            table.add_column("Confidence", justify="right")
            table.add_column("Reason", style="dim")
            for finding in findings:
                table.add_row(
                    escape(finding.name),
                    escape(str(finding.version)),
                    f"{finding.confidence:.2f}",
                    finding.reason,
                )
            self.console.print(table)

    def report_complexity(self, result: AnalysisResult):
        table = Table(title="Complexity Hotspots")
        table.add_column("#", justify="right")
        table.add_column("File", style="cyan", no_wrap=False)
        table.add_column("Complexity", justify="right")
        table.add_column("LOC", style="dim", justify="right")
        table.add_column("Functions", style="dim", justify="right")

        for index, report in enumerate(result.complexity[:MAX_HOTSPOTS_SHOWN], start=1):
            style = complexity_style(report.complexity)
            table.add_row(
                str(index),
                escape(self.shorten_path(report.file)),
                f"[{style}]{report.complexity}[/{style}]",
                str(report.loc),
                str(report.functions),
            )

        self.console.print(table)

    def recommendations(self, result: AnalysisResult) -> List[str]:
        recommendations = []
        if result.unused_imports:
            recommendations.append(
                f"Remove {len(result.unused_imports)} unused imports to reduce bundle size"
            )
        if result.unused_dependencies:
            recommendations.append(
                f"Remove {len(result.unused_dependencies)} unused dependencies to speed up installs"
            )
        high_complexity = [c for c in result.complexity if c.complexity > HIGH_COMPLEXITY]
        if high_complexity:
            recommendations.append(
                f"Refactor {len(high_complexity)} high-complexity files for better maintainability"
            )
        return recommendations

    def report_recommendations(self, result: AnalysisResult):
        recommendations = self.recommendations(result)
        if recommendations:
            body = "\n".join(f"{i}. {rec}" for i, rec in enumerate(recommendations, start=1))
        else:
            body = "[green]✓ Your codebase looks clean![/green]"

        body += (
            "\n\n[bold]Next steps:[/bold]"
            "\n[dim]  codeguardian clean --dry-run to preview the cleanup[/dim]"
            "\n[dim]  codeguardian clean --interactive for guided cleanup[/dim]"
        )
        self.console.print(Panel(body, title="Recommendations", border_style="green"))

    def _print_paths(self, label: str, paths: List[str]):
        self.console.print(f"  {label} ({len(paths)}):")
        for file_path in paths:
            self.console.print(f"    [dim]{escape(self.shorten_path(file_path))}[/dim]")

    def report_fix(self, outcome: FixOutcome):
        """Print the result of a cleanup run."""
        if outcome.success:
            self.console.print("\n[bold green]✓ Successfully cleaned up your codebase![/bold green]")
            self.console.print(f"  Files modified: [cyan]{len(outcome.modified_files)}[/cyan]")
            self.console.print(f"  Imports removed: [cyan]{outcome.imports_removed}[/cyan]")
            self.console.print(f"  Dependencies removed: [cyan]{len(outcome.dependencies_removed)}[/cyan]")
        else:
            self.console.print("\n[bold red]✗ Cleanup failed[/bold red]")
            self._print_paths("Modified", outcome.modified_files)
            self._print_paths("Rolled back", outcome.rolled_back_files)

        if outcome.errors:
            self.console.print("[red]Errors encountered:[/red]")
            for error in outcome.errors:
                self.console.print(f"[red]  • {escape(error)}[/red]")
