"""Entry point: python -m dimems [command]

- "init":                  Create the vault skeleton (default)
- "classify TEXT [CTX]":   Classify text and print the routing decision
- "short-term":            Print short-term items
- "episodes":              Print all episodes, newest first
- "concepts":              Print all concepts, by title
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from dimems.config import DimemsConfig, load_config
from dimems.errors import DimemsError


def _setup_logging(config: DimemsConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    if config.logging.file:
        log_file = Path(config.logging.file)
        if not log_file.is_absolute():
            log_file = Path(config.vault.path) / log_file
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logging.getLogger().addHandler(handler)


def _print(data: object) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _usage() -> None:
    print("Usage: python -m dimems [init|classify TEXT [CONTEXT]|short-term|episodes|concepts]")
    print("  init       : Create the vault skeleton (default)")
    print("  classify   : Classify text into a memory kind")
    print("  short-term : List short-term items")
    print("  episodes   : List episodes")
    print("  concepts   : List concepts")


def main() -> None:
    args = sys.argv[1:]
    cmd = args[0] if args else "init"

    if cmd not in ("init", "classify", "short-term", "episodes", "concepts"):
        _usage()
        sys.exit(1)
    if cmd == "classify" and len(args) < 2:
        _usage()
        sys.exit(1)

    config = load_config()
    _setup_logging(config)

    from dimems.core import MemorySystem

    try:
        system = MemorySystem(config)
        if cmd == "init":
            print(f"Vault ready: {system.layout.root}")
        elif cmd == "classify":
            context = args[2] if len(args) > 2 else None
            _print(system.classifier.classify(args[1], context).to_dict())
        elif cmd == "short-term":
            _print([item.to_dict() for item in system.short_term.read().items])
        elif cmd == "episodes":
            _print([e.to_dict() for e in system.episodic.get_all()])
        elif cmd == "concepts":
            _print([c.to_dict() for c in system.longterm.get_all()])
    except DimemsError as e:
        print(f"{e.code}: {e.message}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
