"""Extract git history via subprocess."""

import subprocess
from pathlib import Path
from typing import Optional

from ..config import AnalysisConfig
from ..exceptions import GitCommandError, InvalidPathError
from ..logging_config import get_logger
from .log_parser import LOG_FORMAT, parse_log
from .models import GitHistory

logger = get_logger(__name__)


class GitExtractor:
    """Run ``git log --numstat`` with the configured filters and parse the result.

    The whole log is buffered before parsing. Failures to run git, a
    non-zero exit status and an empty history are all fatal.
    """

    def __init__(self, repo_path: str, config: Optional[AnalysisConfig] = None):
        self.repo_path = str(Path(repo_path).resolve())
        self.config = config or AnalysisConfig()

    def extract(self) -> GitHistory:
        """Validate the repository, run the log and parse it.

        Raises:
            InvalidPathError: If the path does not exist or is not a directory
            GitCommandError: If git cannot run or exits with an error
            NoCommitsError: If the log contains no commits
        """
        self.validate()
        raw = self.run_log()
        commits = parse_log(raw)
        history = GitHistory(commits=commits)
        logger.debug(
            "Extracted %d commits touching %d files over %d days",
            history.total_commits,
            len(history.file_set),
            history.span_days,
        )
        return history

    def validate(self) -> None:
        path = Path(self.repo_path)
        if not path.exists():
            raise InvalidPathError(path, "does not exist")
        if not path.is_dir():
            raise InvalidPathError(path, "not a directory")
        self._run(["rev-parse", "--git-dir"])

    def run_log(self) -> str:
        return self._run(self.build_log_args())

    def build_log_args(self) -> list[str]:
        """Arguments for ``git log`` (without the leading ``git -C <repo> -c ...``)."""
        cfg = self.config
        args = ["log", f"--format={LOG_FORMAT}", "--numstat"]

        if cfg.branch:
            args.append(cfg.branch)
        else:
            args.append("--all")

        if cfg.since:
            args.append(f"--since={cfg.since}")
        if cfg.until:
            args.append(f"--until={cfg.until}")
        for author in cfg.authors:
            args.append(f"--author={author}")
        if cfg.exclude_merges:
            args.append("--no-merges")
        if cfg.max_commits:
            args.append(f"-n{cfg.max_commits}")

        pathspecs = list(cfg.include_paths)
        if cfg.exclude_paths:
            if not pathspecs:
                pathspecs.append(".")
            pathspecs.extend(f":!{p}" for p in cfg.exclude_paths)
        if pathspecs:
            args.append("--")
            args.extend(pathspecs)

        return args

    def _run(self, args: list[str]) -> str:
        # non-ASCII paths verbatim; quotes and control characters stay C-quoted
        cmd = ["git", "-C", self.repo_path, "-c", "core.quotePath=false", *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.config.git_timeout_seconds,
            )
        except FileNotFoundError as e:
            raise GitCommandError(cmd, f"git executable not found: {e}")
        except subprocess.TimeoutExpired:
            raise GitCommandError(
                cmd, f"timed out after {self.config.git_timeout_seconds}s"
            )

        if result.returncode != 0:
            raise GitCommandError(cmd, result.stderr or "", result.returncode)
        return result.stdout
