"""SCM blame ingestion.

`BlameOutput` receives per-file blame from an SCM provider and validates
it: only expected files, every line dated and carrying a revision. At the
end of the analysis, files that never received blame are reported once as
an analysis warning.

`git_blame` is the built-in provider, reading `git blame --line-porcelain`.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from pathlib import Path

from .analysis_warnings import AnalysisWarnings
from .models import BlameLine, InputFile

log = logging.getLogger(__name__)

SCM_DOC_PATH = "/documentation/analysis/scm-integration/"

# Log progress every N files
_PROGRESS_EVERY = 10

# Revision git reports for lines that are not committed yet
_UNCOMMITTED_SHA = "0" * 40


class BlameOutput:
    """Collects and validates blame results for a fixed set of files."""

    def __init__(self, files_to_blame: Iterable[InputFile],
                 warnings: AnalysisWarnings, base_url: str) -> None:
        self._expected: dict[str, InputFile] = {f.path: f for f in files_to_blame}
        self._remaining: dict[str, InputFile] = dict(self._expected)
        self._results: dict[str, list[BlameLine]] = {}
        self._warnings = warnings
        self._base_url = base_url.rstrip("/")
        self._count = 0

    @property
    def results(self) -> dict[str, list[BlameLine]]:
        return dict(self._results)

    def missing_files(self) -> list[InputFile]:
        return list(self._remaining.values())

    def blame_result(self, file: InputFile, lines: Sequence[BlameLine]) -> None:
        """Record the blame of `file`. Invalid input raises ValueError."""
        # A blamed file leaves the remaining set, so a second blame is unexpected too
        if file.path not in self._remaining:
            raise ValueError(f"It was not expected to blame file {file}")

        if file.lines and len(lines) != file.lines:
            log.debug("Blame of %s has %d lines but the file has %d",
                      file, len(lines), file.lines)

        for lineno, line in enumerate(lines, start=1):
            if line.date is None:
                raise ValueError(f"Blame date is null for file {file} at line {lineno}")
            if not line.revision or not line.revision.strip():
                raise ValueError(f"Blame revision is blank for file {file} at line {lineno}")

        self._results[file.path] = list(lines)
        del self._remaining[file.path]
        self._count += 1
        if self._count % _PROGRESS_EVERY == 0:
            log.info("%d/%d files blamed", self._count, len(self._expected))

    def finish(self, success: bool) -> None:
        """Report files left without blame (only after a successful run)."""
        if not success or not self._remaining:
            return
        log.warning("Missing blame information for the following files:")
        for f in self._remaining.values():
            log.warning("  * %s", f)
        log.warning("This may lead to missing/broken features")

        count = len(self._remaining)
        noun = "file" if count == 1 else "files"
        doc_url = f"{self._base_url}{SCM_DOC_PATH}"
        self._warnings.add_unique(
            f"Missing blame information for {count} {noun}. This may lead to some "
            "features not working correctly. Please check the analysis logs and refer to "
            f'<a href="{doc_url}" target="_blank">the documentation</a>.'
        )


# ---------------------------------------------------------------------------
# git provider
# ---------------------------------------------------------------------------


def _git(args: list[str], cwd: str | Path) -> str:
    """Run a git command, return stdout. Returns empty string on failure."""
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=60,
            check=False,
        )
        if result.returncode != 0:
            return ""
        return result.stdout
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return ""


def parse_line_porcelain(out: str) -> list[BlameLine]:
    """Parse `git blame --line-porcelain` output into one BlameLine per line.

    Returns an empty list when any line is uncommitted: partial blame is
    worse than none.
    """
    lines: list[BlameLine] = []
    revision = ""
    author = ""
    date: datetime | None = None
    header = True

    for raw in out.split("\n"):
        if header:
            parts = raw.split(" ")
            if not raw or len(parts[0]) not in (40, 64):
                continue
            revision, author, date = parts[0], "", None
            header = False
        elif raw.startswith("\t"):
            if revision == _UNCOMMITTED_SHA:
                log.debug("Uncommitted line found, skipping blame")
                return []
            lines.append(BlameLine(date=date, revision=revision, author=author))
            header = True
        elif raw.startswith("author-mail "):
            author = raw[len("author-mail "):].strip().strip("<>")
        elif raw.startswith("author-time "):
            try:
                date = datetime.fromtimestamp(int(raw.split(" ", 1)[1]), tz=timezone.utc)
            except ValueError:
                date = None
    return lines


def git_blame(repo: str | Path, filepath: str) -> list[BlameLine]:
    """Blame `filepath` in the working tree. Empty list when git can not blame it."""
    out = _git(["blame", "--line-porcelain", "-w", "--", filepath], cwd=repo)
    if not out:
        return []
    return parse_line_porcelain(out)


def blame_files(repo: str | Path, files: Sequence[InputFile],
                output: BlameOutput) -> None:
    """Blame every file through git and feed the results to `output`."""
    for f in files:
        lines = git_blame(repo, f.path)
        if not lines:
            log.debug("No blame for %s", f)
            continue
        output.blame_result(f, lines)
    output.finish(True)
