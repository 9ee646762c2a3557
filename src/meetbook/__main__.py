"""Entry point: python -m meetbook [chat|export|import PATH]

- No args / "chat": Interactive CLI REPL
- "export":         Write a backup through the configured file host
- "import PATH":    Restore a backup file (asks for confirmation)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from meetbook.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_app(prompt=input):
    config = load_config()
    _setup_logging(config.log_level)

    from meetbook.core import Meetbook, build_file_host

    return Meetbook(config, file_host=build_file_host(config, prompt))


def _run_cli() -> None:
    """Interactive CLI REPL mode."""
    from meetbook.connectors.cli import CLIConnector, prompt

    cli = CLIConnector(_build_app(prompt))

    try:
        asyncio.run(cli.start())
    except KeyboardInterrupt:
        pass


def _run_export() -> None:
    app = _build_app()
    path = asyncio.run(app.save_backup())
    print(f"Backup saved to {path}" if path else "Export cancelled.")


def _run_import(path: str | None) -> None:
    from meetbook.errors import MeetbookError

    app = _build_app()

    def confirm() -> bool:
        answer = input("This will overwrite all current data. Continue? (y/N) ")
        return answer.strip().lower() in ("y", "yes")

    try:
        counts = asyncio.run(app.load_backup(confirm, path))
    except MeetbookError as e:
        print(f"Failed to restore data: {e}", file=sys.stderr)
        sys.exit(1)
    if counts is None:
        print("Nothing restored.")
    else:
        print(f"Restored {counts[0]} contacts and {counts[1]} meetings.")


def main() -> None:
    cmd = sys.argv[1] if len(sys.argv) > 1 else "chat"

    if cmd in ("chat", "repl"):
        _run_cli()
    elif cmd == "export":
        _run_export()
    elif cmd == "import":
        _run_import(sys.argv[2] if len(sys.argv) > 2 else None)
    else:
        print("Usage: python -m meetbook [chat|export|import PATH]")
        print("  chat         Interactive CLI REPL (default)")
        print("  export       Save a backup file")
        print("  import PATH  Restore from a backup file")
        sys.exit(1)


if __name__ == "__main__":
    main()
