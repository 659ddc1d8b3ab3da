"""Print the Codex instructions: ``python -m codexcache [--json]``."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from codexcache.config import Settings
from codexcache.instructions import get_codex_instructions
from codexcache.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="codexcache",
        description="Print the current Codex instructions, served from the local cache when possible.",
    )
    parser.add_argument("--json", action="store_true", help='print {"content": ...} instead')
    args = parser.parse_args(argv)

    settings = Settings()
    configure_logging(settings.logging)

    content = asyncio.run(get_codex_instructions(settings))
    if args.json:
        sys.stdout.write(json.dumps({"content": content}) + "\n")
    else:
        sys.stdout.write(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())
