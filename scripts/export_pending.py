"""Export the local pending queue to a JSON file.

Note: The pending queue is the only copy of roll calls taken offline until
they are synchronized. Run this before clearing the offline storage directory
or reinstalling the device.
"""

from __future__ import annotations

import importlib
import json
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.roll_call.roll_call.core.constants import QUEUE_STORAGE_KEY
from src.roll_call.roll_call.storage.json_file_store import JsonFileStore


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    # raw items, so entries that no longer decode are exported too
    entries = JsonFileStore(settings.OFFLINE_STORAGE_DIR).get(QUEUE_STORAGE_KEY) or []

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"chamadas_pendentes_{ts}.json"

    with out_file.open("w", encoding="utf-8") as f:
        json.dump(entries, f, ensure_ascii=False, indent=2)
    print(f"OK: {len(entries)} pending roll calls exported to {out_file}")


if __name__ == "__main__":
    main()
