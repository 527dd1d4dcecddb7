"""Example: using the offline core directly (without Flask).

Takes one roll call for class C1, submits it (directly or into the pending
queue, depending on connectivity) and then runs a sync pass.
Run `python scripts/init_db.py --seed` first.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.roll_call.roll_call.container import build_container
from src.roll_call.roll_call.core.enums import MarkStatus


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, storage_dir=settings.OFFLINE_STORAGE_DIR)
    container.connectivity.refresh()

    service = container.roll_call_service
    today = date.today()
    service.set_mark("C1", today, "s1", MarkStatus.PRESENT)
    service.set_mark("C1", today, "s2", MarkStatus.JUSTIFIED)
    service.set_mark("C1", today, "s3", MarkStatus.ABSENT)

    print(service.submit("C1", today).to_dict())
    print("pending:", container.synchronizer.pending_count())
    print(container.synchronizer.sync().to_dict())


if __name__ == "__main__":
    main()
