"""List (employee_id, work_date) pairs holding more than one attendance row.

Legacy data written before the unique key existed may contain such pairs;
they must be merged by hand before ``uq_attendance_employee_date`` can be added.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from secureattend.database.connection import DBConfig, DatabaseConnection
from secureattend.database.mysql_base import db_cursor, fetchall


def find_duplicates(conn: DatabaseConnection) -> list[dict]:
    with db_cursor(conn) as (_, cur):
        cur.execute(
            """
            SELECT employee_id, work_date, COUNT(*) AS copies, GROUP_CONCAT(id ORDER BY id) AS ids
            FROM attendances
            GROUP BY employee_id, work_date
            HAVING COUNT(*) > 1
            ORDER BY work_date, employee_id
            """
        )
        return fetchall(cur)


def main() -> int:
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(settings.DB_CONFIG))

    rows = find_duplicates(conn)
    if not rows:
        print("OK: no duplicate attendance rows")
        return 0

    for r in rows:
        print(f"{r['employee_id']} {r['work_date']}: {r['copies']} rows (ids {r['ids']})")
    print(f"Found {len(rows)} duplicated employee/date pairs")
    return 1


if __name__ == "__main__":
    sys.exit(main())
