import pytest
from rich.console import Console

import endpointwizard.services.prompter as prompter_module
from endpointwizard.models import Choice, Question, QuestionKind, Separator
from endpointwizard.services.prompter import RichPrompter


class FakePrompt:
    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def ask(self, message, **kwargs):
        self.calls.append((message, kwargs))
        return self.answers.pop(0)


def install_prompt(monkeypatch, answers):
    fake = FakePrompt(answers)
    monkeypatch.setattr(prompter_module, "Prompt", fake)
    return fake


def test_text_question_passes_default_and_password_flag(monkeypatch):
    fake = install_prompt(monkeypatch, ["s3cret"])
    prompter = RichPrompter(Console(record=True))

    answer = prompter.ask(Question("password", "Enter password", kind=QuestionKind.PASSWORD, default=""))

    assert answer == "s3cret"
    assert fake.calls[0][1]["password"] is True
    assert fake.calls[0][1]["default"] == ""


def test_required_question_reprompts_on_empty_answer(monkeypatch):
    fake = install_prompt(monkeypatch, ["", "admin"])
    console = Console(record=True)

    answer = RichPrompter(console).ask(Question("user", "Enter user", required=True))

    assert answer == "admin"
    assert len(fake.calls) == 2
    assert "Please provide a valid user" in console.export_text()


def test_validator_message_is_shown_and_question_repeated(monkeypatch):
    install_prompt(monkeypatch, ["abc", "5432"])
    console = Console(record=True)
    question = Question(
        "port",
        "Enter port",
        validate=lambda value: True if value.isdigit() else "Please provide a valid port",
    )

    answer = RichPrompter(console).ask(question)

    assert answer == "5432"
    assert "Please provide a valid port" in console.export_text()


def test_list_question_numbers_selectable_choices_only(monkeypatch):
    fake = install_prompt(monkeypatch, ["2"])
    console = Console(record=True)
    question = Question(
        "choice",
        "Set up a new server or deploy to an existing server?",
        kind=QuestionKind.LIST,
        default="b",
        choices=[
            Separator("You can set up a server locally:"),
            Choice("a", "Use existing database"),
            Choice("b", "Create new database"),
            Separator(),
            Choice("c", "Demo server"),
        ],
    )

    answer = RichPrompter(console).ask(question)

    output = console.export_text()
    assert answer == "b"
    assert "You can set up a server locally:" in output
    assert " 3  Demo server" in output
    assert fake.calls[0][1]["choices"] == ["1", "2", "3"]
    assert fake.calls[0][1]["default"] == "2"


def test_list_question_without_choices_is_rejected(monkeypatch):
    install_prompt(monkeypatch, [])
    question = Question("choice", "Pick", kind=QuestionKind.LIST, choices=[Separator("nothing")])

    with pytest.raises(ValueError, match="no selectable choices"):
        RichPrompter(Console(record=True)).ask(question)


def test_confirm_question_uses_confirm_prompt(monkeypatch):
    calls = []

    def fake_confirm(message, **kwargs):
        calls.append((message, kwargs))
        return True

    monkeypatch.setattr(prompter_module.Confirm, "ask", fake_confirm)

    answer = RichPrompter(Console(record=True)).ask(
        Question("ssl", "Use SSL?", kind=QuestionKind.CONFIRM, default=False)
    )

    assert answer is True
    assert calls[0][1]["default"] is False
