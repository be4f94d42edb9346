"""Test doubles for prompts and child processes, plus a sample npm project."""

import json
import pathlib
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from npm_publish_scripts.exceptions import ProcessFailure
from npm_publish_scripts.process import ProcessResult
from npm_publish_scripts.prompts import Answers, Question


class FakePrompter:
    """Answers questions from a dict and records what was asked.

    Unanswered questions fall back to their default. A ``when`` predicate is
    honoured the same way the questionary prompter does.
    """

    def __init__(self, answers: Optional[Answers] = None, error: Optional[BaseException] = None):
        self.answers = dict(answers or {})
        self.error = error
        self.asked: List[Question] = []

    async def ask(self, questions: Sequence[Question]) -> Answers:
        if self.error is not None:
            raise self.error
        answers: Answers = {}
        for question in questions:
            if not question.applies(answers):
                continue
            self.asked.append(question)
            answers[question.name] = self.answers.get(
                question.name, getattr(question, "default", None)
            )
        return answers

    def asked_names(self) -> List[str]:
        return [q.name for q in self.asked]


Call = Tuple[str, Tuple[str, ...]]
Handler = Callable[[str, Tuple[str, ...], Optional[pathlib.Path]], Optional[ProcessResult]]


class FakeRunner:
    """Stands in for ProcessRunner without spawning anything.

    ``outputs`` maps a command line prefix (e.g. ``"git rev-parse"``) to the
    stdout it should produce. ``failures`` maps a prefix to an exit code.
    ``handlers`` can run side effects such as creating files.
    """

    def __init__(self):
        self.calls: List[Call] = []
        self.cwds: List[Optional[pathlib.Path]] = []
        self.outputs: Dict[str, str] = {}
        self.failures: Dict[str, int] = {}
        self.handlers: Dict[str, Handler] = {}
        self.terminated = 0

    def _match(self, table: dict, line: str):
        for prefix in sorted(table, key=len, reverse=True):
            if line == prefix or line.startswith(prefix + " "):
                return table[prefix]
        return None

    async def run(self, command, args=(), *, cwd=None, capture=False) -> ProcessResult:
        args = tuple(args)
        line = " ".join([command, *args])
        self.calls.append((command, args))
        self.cwds.append(cwd)

        handler = self._match(self.handlers, line)
        if handler is not None:
            result = handler(command, args, cwd)
            if result is not None:
                return result

        code = self._match(self.failures, line)
        if code is not None:
            raise ProcessFailure(line, code)
        stdout = self._match(self.outputs, line) or ""
        return ProcessResult(line, 0, stdout if capture else "")

    async def terminate_all(self) -> None:
        self.terminated += 1

    def lines(self) -> List[str]:
        return [" ".join([command, *args]) for command, args in self.calls]

    def ran(self, prefix: str) -> bool:
        return any(line == prefix or line.startswith(prefix + " ") for line in self.lines())


@pytest.fixture
def npm_project(tmp_path):
    """An npm project with build and test scripts and a docs directory."""
    project = tmp_path / "project"
    project.mkdir()
    manifest = {
        "name": "example-lib",
        "version": "1.2.3",
        "scripts": {"build": "tsc", "test": "mocha"},
    }
    (project / "package.json").write_text(json.dumps(manifest, indent=2))
    docs = project / "docs"
    docs.mkdir()
    (docs / "_config.yml").write_text("title: Example\n")
    (docs / "index.md").write_text("# Example\n")
    return project

