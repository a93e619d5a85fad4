"""Example: resolve attendance through the service layer (no Flask).

Controllers are thin; every rule lives in services and the pure resolver.
"""

import importlib
import sys

from config import get_settings_module

from secureattend.container import build_container


def main(employee_id: str = "TSI00123"):
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, attendance_settings=settings.ATTENDANCE)

    res = container.attendance_service.resolve_for(employee_id)
    print(f"{employee_id} {res.target_date}: state={res.state.value} status={res.status.value if res.status else '-'}")
    for row in container.attendance_service.day_view():
        print(row.to_dict())


if __name__ == "__main__":
    main(*sys.argv[1:2])
