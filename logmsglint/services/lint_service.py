"""Service for linting log messages across files and directories."""

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from logmsglint.analyzers.base import Diagnostic
from logmsglint.analyzers.fixes import apply_fixes
from logmsglint.analyzers.message_analyzer import LogMessageAnalyzer
from logmsglint.config import LintConfig, get_settings, parse_config
from logmsglint.parsers.python_parser import PythonParser

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Lint result for a single file."""

    file_path: str
    diagnostics: list[Diagnostic] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    fixes_applied: int = 0


@dataclass
class LintResult:
    """Lint result for a whole run."""

    files: list[FileResult] = field(default_factory=list)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [d for f in self.files for d in f.diagnostics]

    @property
    def errors(self) -> list[str]:
        return [e for f in self.files for e in f.errors]

    @property
    def files_checked(self) -> int:
        return len(self.files)

    @property
    def fixes_applied(self) -> int:
        return sum(f.fixes_applied for f in self.files)


class LintService:
    """Runs the log message analyzer over source text, files and directory trees."""

    PYTHON_EXTENSIONS = {".py", ".pyi"}

    def __init__(
        self,
        config: Optional[Union[LintConfig, dict]] = None,
        exclude_dirs: Optional[Iterable[str]] = None,
    ):
        settings = get_settings()
        config = settings.lint_config() if config is None else parse_config(config)
        if exclude_dirs is None:
            exclude_dirs = settings.exclude_dirs
        self.exclude_dirs = set(exclude_dirs)
        self.parser = PythonParser()
        self.analyzer = LogMessageAnalyzer(config.sensitive_patterns)

    def lint_source(self, code: str, file_path: str = "<string>") -> FileResult:
        """Lint Python source held in memory."""
        unit = self.parser.parse(code, file_path)
        return FileResult(
            file_path=file_path,
            diagnostics=self.analyzer.analyze(unit),
            errors=list(unit.errors),
        )

    def fix_source(self, code: str, file_path: str = "<string>") -> tuple[str, FileResult]:
        """Lint ``code`` and apply every non-overlapping suggested fix.

        Returns:
            The fixed source and the lint result for the original source
        """
        unit = self.parser.parse(code, file_path)
        result = FileResult(
            file_path=file_path,
            diagnostics=self.analyzer.analyze(unit),
            errors=list(unit.errors),
        )
        fixed, result.fixes_applied = apply_fixes(unit.source, result.diagnostics)
        return fixed.decode("utf-8"), result

    def lint_file(self, file_path: str, fix: bool = False) -> FileResult:
        """Lint a file on disk, optionally rewriting it with the fixes applied."""
        try:
            with open(file_path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {file_path}: {e}")
            return FileResult(file_path=file_path, errors=[f"{file_path}: {e}"])

        if not fix:
            return self.lint_source(content, file_path)

        fixed, result = self.fix_source(content, file_path)
        if result.fixes_applied:
            with open(file_path, "w", encoding="utf-8", newline="") as f:
                f.write(fixed)
            logger.info(f"Applied {result.fixes_applied} fixes to {file_path}")
        return result

    def lint_paths(self, paths: Iterable[str], fix: bool = False) -> LintResult:
        """Lint files and directory trees.

        Args:
            paths: Files or directories; directories are walked recursively
            fix: Rewrite files with suggested fixes applied

        Returns:
            LintResult with one entry per Python file
        """
        result = LintResult()
        for file_path in self.iter_python_files(paths):
            result.files.append(self.lint_file(file_path, fix=fix))

        logger.info(
            f"Checked {result.files_checked} files: "
            f"{len(result.diagnostics)} diagnostics, {len(result.errors)} errors"
        )
        return result

    def iter_python_files(self, paths: Iterable[str]) -> Iterable[str]:
        for path in paths:
            if os.path.isdir(path):
                for root, dirs, files in os.walk(path):
                    # Skip unwanted directories
                    dirs[:] = sorted(d for d in dirs if d not in self.exclude_dirs)
                    for filename in sorted(files):
                        if os.path.splitext(filename)[1] in self.PYTHON_EXTENSIONS:
                            yield os.path.join(root, filename)
            else:
                yield path
