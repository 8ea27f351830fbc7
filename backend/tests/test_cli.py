"""
Tests for the terminal front end.
"""
from io import StringIO

from saturn import cli
from saturn.services.llm.errors import TransportError


class StubOrchestrator:
    def __init__(self, responses):
        self._responses = list(responses)
        self.queries = []

    async def answer(self, query, timeout_seconds=None):
        self.queries.append(query)
        outcome = self._responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def scripted_input(lines):
    pending = list(lines)

    def read_line(prompt):
        if not pending:
            raise EOFError
        return pending.pop(0)

    return read_line


def test_chat_answers_each_line_until_exit():
    orchestrator = StubOrchestrator(["first answer", "second answer"])
    out, err = StringIO(), StringIO()

    cli.run_chat(
        orchestrator,
        read_line=scripted_input(["hello", "", "how are you", "exit", "never read"]),
        out=out,
        err=err,
    )

    assert orchestrator.queries == ["hello", "how are you"]
    text = out.getvalue()
    assert "first answer" in text
    assert "second answer" in text
    assert "Goodbye!" in text
    assert "Conversation ended." in text


def test_chat_reports_errors_and_continues():
    orchestrator = StubOrchestrator([TransportError("perplexity", "down"), "recovered"])
    out, err = StringIO(), StringIO()

    cli.run_chat(orchestrator, read_line=scripted_input(["q1", "q2"]), out=out, err=err)

    assert "Saturn encountered an error: down" in err.getvalue()
    assert "recovered" in out.getvalue()


def test_ask_prints_answer(monkeypatch, capsys):
    orchestrator = StubOrchestrator(["42"])
    monkeypatch.setattr(cli, "build_orchestrator", lambda settings: orchestrator)

    exit_code = cli.main(["ask", "What is the answer?"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "42"
    assert orchestrator.queries == ["What is the answer?"]


def test_ask_returns_non_zero_on_provider_error(monkeypatch, capsys):
    orchestrator = StubOrchestrator([TransportError("perplexity", "down")])
    monkeypatch.setattr(cli, "build_orchestrator", lambda settings: orchestrator)

    exit_code = cli.main(["ask", "weather?"])

    assert exit_code == 1
    assert "down" in capsys.readouterr().err
