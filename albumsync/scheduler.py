"""Register albumsync to run in background mode whenever the machine starts.

Each OS gets its own StartupScheduler; callers only hand over the command
and its arguments.
"""

import logging
import os
import plistlib
import shlex
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

TASK_NAME = "ImmichAlbumSync"
BACKGROUND_FLAG = "--background"

# BUILTIN\Administrators and the High Mandatory Level
ADMIN_GROUP_SID = "S-1-5-32-544"
HIGH_INTEGRITY_SID = "S-1-16-12288"


class SchedulerError(Exception):
    """Registering the startup job (or checking privileges) failed."""

    def __init__(self, message: str, returncode: Optional[int] = None, stdout: str = "", stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def details(self) -> str:
        lines = [str(self)]
        if self.returncode is not None:
            lines.append(f"Status: {self.returncode}")
        if self.stdout:
            lines.append(f"Stdout: {self.stdout.strip()}")
        if self.stderr:
            lines.append(f"Stderr: {self.stderr.strip()}")
        return "\n".join(lines)


def _run(cmd: Sequence[str], input_text: Optional[str] = None) -> subprocess.CompletedProcess:
    """Run an OS tool, turning a missing binary or non-zero exit into SchedulerError."""
    logger.debug("Running %s", cmd)
    try:
        result = subprocess.run(list(cmd), input=input_text, capture_output=True, text=True)
    except OSError as e:
        raise SchedulerError(f"Could not run {cmd[0]}: {e}") from e
    if result.returncode != 0:
        raise SchedulerError(
            f"{cmd[0]} failed",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


class StartupScheduler:
    """Registers a command to run at system startup for the current user."""

    name = "startup scheduler"
    requires_elevation = False

    def register_startup_job(self, command: str, args: Sequence[str]) -> str:
        """Register the job and return a short description of what was set up."""
        raise NotImplementedError


class WindowsTaskScheduler(StartupScheduler):
    name = "Windows Task Scheduler"
    requires_elevation = True

    def __init__(self, task_name: str = TASK_NAME, username: Optional[str] = None):
        self.task_name = task_name
        self.username = username if username is not None else os.environ.get("USERNAME", "")

    @staticmethod
    def ps_quote(value: str) -> str:
        """Single-quoted PowerShell string literal."""
        return "'" + value.replace("'", "''") + "'"

    @classmethod
    def ps_argument(cls, value: str) -> str:
        """
        One -ArgumentList element. Start-Process joins elements with plain spaces,
        so each carries its own double quotes; they are written as \\" because
        powershell.exe strips bare double quotes from its -Command line.
        """
        return cls.ps_quote(f'\\"{value}\\"')

    def task_command(self, command: str, args: Sequence[str]) -> str:
        """PowerShell one-liner that starts the program without a window."""
        command_line = (
            f"powershell -Command Start-Process -WindowStyle Hidden -FilePath {self.ps_quote(command)}"
        )
        if args:
            arg_list = ",".join(self.ps_argument(arg) for arg in args)
            command_line += f" -ArgumentList {arg_list}"
        return command_line

    def build_args(self, command: str, args: Sequence[str]) -> List[str]:
        schtasks_args = [
            "schtasks",
            "/Create",
            "/TN", self.task_name,
            "/TR", self.task_command(command, args),
            "/SC", "ONSTART",
            "/RL", "HIGHEST",
            "/F",
        ]
        # Without /RU the task runs in the default (SYSTEM) context
        if self.username:
            schtasks_args.extend(["/RU", self.username])
        return schtasks_args

    def register_startup_job(self, command: str, args: Sequence[str]) -> str:
        _run(self.build_args(command, args))
        if self.username:
            return f"Scheduled task '{self.task_name}' created for user '{self.username}'."
        return f"Scheduled task '{self.task_name}' created in the default user context."


class CronScheduler(StartupScheduler):
    name = "cron"

    def __init__(self, marker: str = TASK_NAME):
        self.marker = marker

    def entry(self, command: str, args: Sequence[str]) -> str:
        cmdline = " ".join(shlex.quote(part) for part in [command, *args])
        return f"@reboot {cmdline} >/dev/null 2>&1 # {self.marker}"

    def current_crontab(self) -> str:
        try:
            return _run(["crontab", "-l"]).stdout
        except SchedulerError as e:
            # crontab -l exits non-zero when the user has no crontab yet
            if e.returncode is not None and "no crontab" in e.stderr.lower():
                return ""
            raise

    def merged_crontab(self, existing: str, entry: str) -> str:
        lines = [line for line in existing.splitlines() if not line.endswith(f"# {self.marker}")]
        lines.append(entry)
        return "\n".join(lines) + "\n"

    def register_startup_job(self, command: str, args: Sequence[str]) -> str:
        entry = self.entry(command, args)
        _run(["crontab", "-"], input_text=self.merged_crontab(self.current_crontab(), entry))
        return f"Crontab entry added: {entry}"


class LaunchAgentScheduler(StartupScheduler):
    name = "launchd"

    def __init__(self, label: str = "com.immich.albumsync", agents_dir: Optional[Path] = None):
        self.label = label
        self.agents_dir = agents_dir or Path.home() / "Library" / "LaunchAgents"

    @property
    def plist_file(self) -> Path:
        return self.agents_dir / f"{self.label}.plist"

    def plist(self, command: str, args: Sequence[str]) -> dict:
        return {
            "Label": self.label,
            "ProgramArguments": [command, *args],
            "RunAtLoad": True,
        }

    def register_startup_job(self, command: str, args: Sequence[str]) -> str:
        try:
            self.agents_dir.mkdir(parents=True, exist_ok=True)
            with open(self.plist_file, "wb") as f:
                plistlib.dump(self.plist(command, args), f)
        except OSError as e:
            raise SchedulerError(f"Could not write {self.plist_file}: {e}") from e
        _run(["launchctl", "load", "-w", str(self.plist_file)])
        return f"Launch agent installed: {self.plist_file}"


def get_scheduler(platform: str = sys.platform) -> StartupScheduler:
    if platform.startswith("win"):
        return WindowsTaskScheduler()
    if platform == "darwin":
        return LaunchAgentScheduler()
    return CronScheduler()


def is_running_as_admin(platform: str = sys.platform) -> bool:
    """
    True if the process runs elevated. Raises SchedulerError if that can't be determined.
    """
    if platform.startswith("win"):
        groups = _run(["whoami", "/groups"]).stdout
        return (ADMIN_GROUP_SID in groups and "Enabled group" in groups) or HIGH_INTEGRITY_SID in groups
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        raise SchedulerError("Cannot determine user id on this platform")
    return geteuid() == 0


def startup_command(config_path: Optional[Path] = None) -> Tuple[str, List[str]]:
    """
    Command and arguments that run this program once in background mode.
    """
    if getattr(sys, "frozen", False):
        command, args = sys.executable, []
    else:
        command, args = sys.executable, [str(Path(sys.argv[0]).resolve())]
    args.append(BACKGROUND_FLAG)
    if config_path:
        args.extend(["--config", str(Path(config_path).resolve())])
    return command, args
