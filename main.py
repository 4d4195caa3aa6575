"""
Decide to Run — Entry Point.

`python main.py` starts the Telegram bot.
`python main.py import offices.json` loads a JSON list of office records
into the local SQLite offices table and exits.
"""

import json
import logging
import sys
from pathlib import Path

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def import_offices(path: str) -> int:
    """Upsert every record in a JSON export into OfficeDB. Returns the count stored."""
    from decide_to_run.data.db import OfficeDB

    records = json.loads(Path(path).read_text())
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of office records")
    return OfficeDB().import_records(records)


if __name__ == "__main__":
    if len(sys.argv) >= 2 and sys.argv[1] == "import":
        if len(sys.argv) != 3:
            print("Usage: python main.py import <offices.json>", file=sys.stderr)
            sys.exit(1)
        print(f"Imported {import_offices(sys.argv[2])} offices")
    else:
        from decide_to_run.bot.telegram_bot import main

        main()
