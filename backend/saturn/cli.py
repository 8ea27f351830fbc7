"""
Terminal front end for Saturn.

Usage:
    saturn ask "What is the weather like today in Boston?"
    saturn chat
    saturn serve [--host 127.0.0.1] [--port 2223]
"""
import argparse
import asyncio
import sys
from typing import Callable, Optional, TextIO

from saturn.core.config import load_settings
from saturn.core.logging import configure_logging, get_logger
from saturn.services.llm.errors import OrchestrationCancelled, ProviderError
from saturn.services.llm.orchestration import SaturnOrchestrator, build_orchestrator

logger = get_logger(__name__)

USER_COLOR = (23, 184, 144)
AI_COLOR = (255, 223, 0)
THOUGHT_COLOR = (100, 100, 100)


def colored(text: str, color: tuple) -> str:
    r, g, b = color
    return f"\x1b[38;2;{r};{g};{b}m{text}\x1b[0m"


def run_chat(
    orchestrator: SaturnOrchestrator,
    read_line: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
    err: TextIO = sys.stderr,
) -> None:
    """Interactive loop: one independent answer per line until 'exit' or EOF."""
    print("Starting new conversation with Saturn.", file=out)
    print("Type 'exit' to end the conversation.\n", file=out)

    while True:
        print(colored("You:", USER_COLOR), file=out)
        try:
            line = read_line("Send a message ('exit' to quit): ")
        except EOFError:
            break

        query = line.strip()
        if not query:
            continue
        if query.lower() == "exit":
            print(colored("Goodbye!", THOUGHT_COLOR), file=out)
            break

        print(colored("THINKING...", THOUGHT_COLOR), file=out)
        try:
            response = asyncio.run(orchestrator.answer(query))
        except (ProviderError, OrchestrationCancelled) as exc:
            print(f"Saturn encountered an error: {exc}", file=err)
            continue

        print(colored("Saturn:", AI_COLOR), file=out)
        print(colored(response, AI_COLOR), file=out)

    print("Conversation ended.", file=out)


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(prog="saturn", description="Saturn query router")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask = subparsers.add_parser("ask", help="Answer a single query and exit")
    ask.add_argument("query", help="Query text")
    ask.add_argument("--timeout", type=float, default=None, help="Overall deadline in seconds")

    subparsers.add_parser("chat", help="Interactive chat session")

    serve = subparsers.add_parser("serve", help="Run the HTTP service")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=2223)

    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(log_level=settings.log_level, json_output=settings.log_json)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("saturn.main:app", host=args.host, port=args.port)
        return 0

    orchestrator = build_orchestrator(settings)

    if args.command == "chat":
        run_chat(orchestrator)
        return 0

    try:
        response = asyncio.run(orchestrator.answer(args.query, timeout_seconds=args.timeout))
    except (ProviderError, OrchestrationCancelled) as exc:
        print(f"Saturn encountered an error: {exc}", file=sys.stderr)
        return 1
    print(response)
    return 0


if __name__ == "__main__":
    sys.exit(main())
