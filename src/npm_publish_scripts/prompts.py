"""Ask the operator questions through questionary."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

import questionary
from questionary import Style

from .exceptions import OperatorInterrupt, PromptFailure

Answers = Dict[str, Any]

style = Style([
    ("qmark", "fg:cyan bold"),
    ("question", "bold"),
    ("answer", "fg:cyan"),
    ("pointer", "fg:cyan bold"),
    ("highlighted", "fg:cyan bold"),
    ("selected", "fg:green"),
])


@dataclass(frozen=True)
class Question:
    name: str
    message: str
    when: Optional[Callable[[Answers], bool]] = field(default=None, compare=False)

    def applies(self, answers: Answers) -> bool:
        return self.when is None or bool(self.when(answers))


@dataclass(frozen=True)
class Confirm(Question):
    default: bool = False


@dataclass(frozen=True)
class Select(Question):
    choices: Sequence[str] = ()
    default: Optional[str] = None


@dataclass(frozen=True)
class Text(Question):
    default: str = ""


class Prompter(Protocol):
    async def ask(self, questions: Sequence[Question]) -> Answers: ...


class QuestionaryPrompter:
    """Prompter backed by questionary's async prompts."""

    async def ask(self, questions: Sequence[Question]) -> Answers:
        """Ask each applicable question in order.

        Questions whose ``when`` predicate is false are skipped and left out of
        the returned answers.

        Raises:
            PromptFailure: The terminal could not run the prompt
            OperatorInterrupt: Ctrl-C was pressed while a prompt was open
        """
        answers: Answers = {}
        for question in questions:
            if not question.applies(answers):
                continue
            try:
                answers[question.name] = await self._build(question).unsafe_ask_async()
            except KeyboardInterrupt as exc:
                raise OperatorInterrupt() from exc
            except Exception as exc:
                raise PromptFailure(exc) from exc
        return answers

    def _build(self, question: Question) -> questionary.Question:
        if isinstance(question, Confirm):
            return questionary.confirm(
                question.message, default=question.default, style=style
            )
        if isinstance(question, Select):
            return questionary.select(
                question.message,
                choices=list(question.choices),
                default=question.default,
                style=style,
            )
        if isinstance(question, Text):
            return questionary.text(
                question.message, default=question.default, style=style
            )
        raise TypeError(f"Unsupported question type: {type(question).__name__}")

