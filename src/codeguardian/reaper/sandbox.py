"""Run the project's test suite to verify a cleanup."""
import json
import logging
import shlex
import subprocess
import threading
from collections import deque
from pathlib import Path
from typing import Dict, Optional

from rich.markup import escape

from codeguardian.analyzer.project_info import ProjectDetector
from codeguardian.utils.logger import sanitize_for_terminal
from codeguardian.utils.safe_console import SafeConsole

log = logging.getLogger(__name__)

DEFAULT_TEST_COMMAND = "npm test"
DEFAULT_TIMEOUT = 300  # seconds


class TestSandbox:
    """Runs the test command in the project root and reports pass/fail."""

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        project_root: str | Path = ".",
        test_command: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        console: Optional[SafeConsole] = None,
    ):
        """Initialize test sandbox.

        Args:
            project_root: Project root directory (the command's cwd)
            test_command: Explicit command; auto-detected when omitted
            timeout: Seconds before the test process is killed
            console: Console for the progress spinner
        """
        self.project_root = Path(project_root).resolve()
        self.test_command = test_command
        self.timeout = timeout
        self.console = console or SafeConsole(stderr=True)

    def _detect_test_command(self) -> str:
        """Use '<package manager> test' when package.json declares a test script."""
        if self.test_command:
            return self.test_command

        package_json = self.project_root / "package.json"
        try:
            scripts = json.loads(package_json.read_text(encoding='utf-8')).get('scripts') or {}
        except (OSError, ValueError, AttributeError):
            scripts = {}

        if isinstance(scripts, dict) and scripts.get('test'):
            manager = ProjectDetector(self.project_root).detect_package_manager()
            return f"{manager} test"

        return DEFAULT_TEST_COMMAND

    def _run_tests(self) -> Dict:
        """Run the test command, showing the last 5 output lines under a spinner.

        Returns:
            Dictionary with exit_code, stdout, command and status
            (RAN, TIMEOUT or MISSING_COMMAND)
        """
        command = self._detect_test_command()
        output_buffer = deque(maxlen=5)
        full_output = []

        try:
            process = subprocess.Popen(
                shlex.split(command),
                cwd=str(self.project_root),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding='utf-8',
                errors='replace',
                bufsize=1,
            )
        except FileNotFoundError:
            error_msg = f"Test command not found: {command}"
            log.warning(error_msg)
            return {"exit_code": -1, "stdout": error_msg, "command": command, "status": "MISSING_COMMAND"}

        timed_out = threading.Event()

        def kill():
            timed_out.set()
            process.kill()

        timer = threading.Timer(self.timeout, kill)
        timer.start()
        try:
            with self.console.status(f"[bold blue]Running tests: {escape(command)}[/bold blue]") as status:
                for line in iter(process.stdout.readline, ''):
                    full_output.append(line)
                    stripped = line.rstrip()
                    if stripped:
                        output_buffer.append(escape(sanitize_for_terminal(stripped)))
                        status.update(
                            f"[bold blue]Running tests...[/bold blue]\n[dim]{chr(10).join(output_buffer)}[/dim]"
                        )
            process.wait()
        finally:
            timer.cancel()
            process.stdout.close()

        if timed_out.is_set():
            log.warning("Test timeout after %s seconds: %s", self.timeout, command)
            return {"exit_code": -1, "stdout": "".join(full_output), "command": command, "status": "TIMEOUT"}

        return {
            "exit_code": process.returncode,
            "stdout": "".join(full_output),
            "command": command,
            "status": "RAN",
        }

    def run_tests(self) -> bool:
        """True if the test command exits with status 0."""
        result = self._run_tests()
        passed = result["exit_code"] == 0
        log.info("Tests %s (%s, exit %s)", "passed" if passed else "failed", result["command"], result["exit_code"])
        return passed
