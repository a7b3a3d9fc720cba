"""Terminal prompts rendered with rich."""

from typing import Any, Dict

from rich.console import Console
from rich.prompt import Confirm, Prompt

from endpointwizard.models import Choice, Question, QuestionKind


class RichPrompter:
    """Answers wizard questions interactively on a terminal."""

    def __init__(self, console: Console):
        self.console = console

    def ask(self, question: Question) -> Any:
        if question.kind is QuestionKind.CONFIRM:
            return Confirm.ask(
                question.message,
                default=bool(question.default),
                console=self.console,
            )
        if question.kind is QuestionKind.LIST:
            return self._ask_list(question)
        return self._ask_text(question)

    def _ask_text(self, question: Question) -> str:
        kwargs: Dict[str, Any] = {
            "console": self.console,
            "password": question.kind is QuestionKind.PASSWORD,
        }
        if question.default is not None:
            kwargs["default"] = str(question.default)

        while True:
            answer = Prompt.ask(question.message, **kwargs) or ""
            if not answer and question.required and question.default is None:
                self.console.print(f"[red]Please provide a valid {question.name}[/red]")
                continue
            if question.validate is not None:
                verdict = question.validate(answer)
                if verdict is not True:
                    message = verdict if isinstance(verdict, str) else f"Invalid {question.name}"
                    self.console.print(f"[red]{message}[/red]")
                    continue
            return answer

    def _ask_list(self, question: Question) -> str:
        selectable = question.selectable()
        if not selectable:
            raise ValueError(f"List question '{question.name}' has no selectable choices.")

        self.console.print(f"[bold]{question.message}[/bold]")
        index = 0
        default_index = None
        for choice in question.choices:
            if isinstance(choice, Choice):
                index += 1
                if choice.value == question.default:
                    default_index = str(index)
                self.console.print(f"  [cyan]{index:>2}[/cyan]  {choice.label}", highlight=False)
            else:
                self.console.print(choice.text, highlight=False)

        kwargs: Dict[str, Any] = {
            "console": self.console,
            "choices": [str(number) for number in range(1, len(selectable) + 1)],
            "show_choices": False,
        }
        if default_index is not None:
            kwargs["default"] = default_index

        answer = Prompt.ask("Select an option", **kwargs)
        return selectable[int(answer) - 1].value
