"""Run one automatic attendance check outside Flask (e.g. from cron).

Exit code is 0 when the run succeeded, 1 when some sessions failed or the run
timed out, 2 when the session store could not be read.
"""

from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.common.logging import configure_logging
from src.school_attendance.school_attendance.container import AutoAttendanceOptions, build_container
from src.school_attendance.school_attendance.core.exceptions import RetrievalError


def main() -> int:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        options=AutoAttendanceOptions.from_settings(settings),
    )
    try:
        result = container.auto_attendance_service.run()
    except RetrievalError as e:
        print(json.dumps({"success": False, "message": str(e)}))
        return 2

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
