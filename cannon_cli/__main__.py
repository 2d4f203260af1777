"""``python -m cannon_cli`` and ``cannon`` script entrypoint."""

from __future__ import annotations

import sys


def main() -> int:
    from .main import main as cli_main

    return cli_main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(main())
