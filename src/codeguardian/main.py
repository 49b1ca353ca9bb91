"""CodeGuardian CLI - find and remove unused imports and dependencies in JS/TS projects."""
from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape

from codeguardian.analyzer.analysis import AnalysisResult, Analyzer
from codeguardian.analyzer.project_info import ProjectDetector
from codeguardian.config import ConfigError, GuardianConfig, __version__, init_config, load_config
from codeguardian.reaper.fixer import AutoFixer
from codeguardian.reaper.manifest import ManifestMissingError
from codeguardian.reporters.console_reporter import ConsoleReporter
from codeguardian.reporters.json_reporter import JSONReporter
from codeguardian.utils.logger import configure_logging
from codeguardian.utils.safe_console import SafeConsole

app = typer.Typer(
    name="codeguardian",
    help="Find and remove unused imports and dependencies in JavaScript/TypeScript projects",
    add_completion=False,
)
console = SafeConsole()
err_console = SafeConsole(stderr=True)


def resolve_project(project_path: str) -> Path:
    """Resolve the project directory or exit with status 1."""
    path = Path(project_path).resolve()
    if not path.is_dir():
        console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(path))}")
        raise typer.Exit(1)
    return path


def load_project_config(project_path: Path, verbose: bool = False) -> GuardianConfig:
    try:
        config = load_config(project_path)
    except ConfigError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if verbose:
        config.verbose = True
    configure_logging(config.verbose, err_console)
    return config


def run_analysis(project_path: Path, config: GuardianConfig, show_progress: bool = True) -> AnalysisResult:
    """Run the analyzer, turning hard failures into exit status 1."""
    analyzer = Analyzer(project_path, config)
    try:
        if show_progress:
            with err_console.status("[bold blue]Analyzing your codebase...[/bold blue]"):
                return analyzer.analyze()
        return analyzer.analyze()
    except (ManifestMissingError, ValueError) as e:
        console.print(f"[bold red]Analysis failed:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def analyze(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Analyze the codebase for unused imports, unused dependencies and complexity."""
    project_path = resolve_project(project_path)
    config = load_project_config(project_path, verbose)

    if not json_output and config.output_format == "json":
        json_output = True

    result = run_analysis(project_path, config, show_progress=not json_output)
    project_info = ProjectDetector(project_path).get_project_info()

    if json_output:
        JSONReporter().report(result, project_info)
    else:
        ConsoleReporter(console, project_path).report(result, project_info)


@app.command()
def clean(
    project_path: str = typer.Argument(".", help="Project root path to clean"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Ask for confirmation before changing files"),
    safe: Optional[bool] = typer.Option(None, "--safe/--no-safe", help="Only remove findings with high confidence"),
    verify_tests: bool = typer.Option(False, "--verify-tests", help="Run tests after cleanup and roll back on failure"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed without making changes"),
    test_command: Optional[str] = typer.Option(None, "--test-command", help="Custom test command (default: detected from package.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Remove unused imports and dependencies from the project."""
    project_path = resolve_project(project_path)
    config = load_project_config(project_path, verbose)

    console.print("\n[bold cyan]CodeGuardian Cleanup[/bold cyan]\n")
    result = run_analysis(project_path, config)

    if not result.unused_imports and not result.unused_dependencies:
        console.print("[green]✓ No unused code found! Your codebase is clean.[/green]")
        return

    console.print(f"Found [yellow]{len(result.unused_imports)}[/yellow] unused imports")
    console.print(f"Found [yellow]{len(result.unused_dependencies)}[/yellow] unused dependencies\n")

    reporter = ConsoleReporter(console, project_path)

    if dry_run:
        console.print("[yellow]DRY RUN - No changes will be made[/yellow]\n")
        if result.unused_imports:
            reporter.report_unused_imports(result)
        if result.unused_dependencies:
            reporter.report_unused_dependencies(result)
        console.print("\n[dim]Dry run complete. Run without --dry-run to apply changes.[/dim]")
        return

    if interactive and not typer.confirm("Proceed with cleanup?", default=True):
        console.print("[yellow]Cleanup cancelled.[/yellow]")
        return

    fixer = AutoFixer(
        project_path,
        safe_mode=config.safe_mode if safe is None else safe,
        require_tests=verify_tests or config.require_tests,
        confidence_floor=config.confidence_threshold,
        test_command=test_command or config.test_command,
    )
    outcome = fixer.fix_result(result)
    reporter.report_fix(outcome)

    if not outcome.success:
        raise typer.Exit(1)


@app.command()
def info(
    project_path: str = typer.Argument(".", help="Project root path"),
):
    """Display information about the project."""
    project_path = resolve_project(project_path)
    project_info = ProjectDetector(project_path).get_project_info()
    ConsoleReporter(console, project_path).report_project_info(project_info)


@app.command()
def init(
    project_path: str = typer.Argument(".", help="Project root path"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Create a .codeguardianrc.json with default settings."""
    project_path = resolve_project(project_path)
    reporter = ConsoleReporter(console, project_path)

    console.print("\n[bold cyan]CodeGuardian Initialization[/bold cyan]\n")
    reporter.report_project_info(ProjectDetector(project_path).get_project_info())

    if not yes and not typer.confirm("Create .codeguardianrc.json with these settings?", default=True):
        console.print("[yellow]Initialization cancelled.[/yellow]")
        return

    try:
        config_path = init_config(project_path)
    except FileExistsError as e:
        console.print(f"[bold red]✗ Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Configuration file created: {escape(str(config_path))}[/green]")
    console.print("[dim]Next steps:[/dim]")
    console.print("[dim]  1. codeguardian analyze[/dim]")
    console.print("[dim]  2. Review the analysis results[/dim]")
    console.print("[dim]  3. codeguardian clean --interactive[/dim]")


def version_callback(value: bool):
    if value:
        console.print(f"codeguardian {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """CodeGuardian - unused import and dependency cleanup for frontend projects."""


if __name__ == "__main__":
    app()
