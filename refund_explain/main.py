"""
Command-line entry point: stream one refund explanation to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TextIO

from .config import Configuration
from .logging_utils import configure_logging, log_operation
from .session import STREAM_ERROR_MESSAGE, ExplainSession
from .stream.transport import StreamTransport


class TerminalDisplay:
    """Writes the growing display text, re-drawing only when it is replaced."""

    def __init__(self, out: TextIO | None = None):
        self.out = out or sys.stdout
        self.shown = ""

    def __call__(self, text: str) -> None:
        if text.startswith(self.shown):
            self.out.write(text[len(self.shown):])
        else:
            # Replaced (step header, finalize, error): start a fresh block
            self.out.write("\n" + text if self.shown else text)
        self.out.flush()
        self.shown = text

    def close(self) -> None:
        if self.shown:
            self.out.write("\n")
            self.out.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refund-explain",
        description="Stream an explanation of a tax refund status.",
    )
    parser.add_argument("return_id", help="Return identifier to explain")
    parser.add_argument("--question", help="Question to ask (default from config)")
    parser.add_argument(
        "--use-backend",
        action="store_true",
        default=None,
        help="Ask the live backend instead of the canned explanation",
    )
    parser.add_argument("--config", help="Path to a YAML configuration file")
    parser.add_argument("--url", help="Explain endpoint URL (overrides config)")
    return parser


@log_operation("explain_cli")
async def run_explain(
    config: Configuration,
    return_id: str,
    *,
    question: str | None = None,
    use_backend: bool | None = None,
    url: str | None = None,
    out: TextIO | None = None,
) -> str:
    """Run one session and return the final display text."""
    explain_config = config.get_explain_config()
    display = TerminalDisplay(out)

    async with StreamTransport.from_config(config) as transport:
        if url:
            transport.url = url
        session = ExplainSession(
            transport,
            display,
            question=question or explain_config["default_question"],
        )
        if use_backend is None:
            use_backend = explain_config["use_backend"]
        await session.start_stream(return_id, use_backend)

    display.close()
    return session.display


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    config = Configuration(args.config)
    configure_logging(config.get_logging_config()["level"])

    try:
        final_display = asyncio.run(
            run_explain(
                config,
                args.return_id,
                question=args.question,
                use_backend=args.use_backend,
                url=args.url,
            )
        )
    except KeyboardInterrupt:
        return 130

    return 1 if final_display == STREAM_ERROR_MESSAGE else 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
