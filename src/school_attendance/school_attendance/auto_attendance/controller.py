from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..container import Container
from ..core.exceptions import RetrievalError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auto-attendance", methods=["GET"], endpoint="api_auto_attendance")
    def api_auto_attendance():
        """Run one automatic attendance check (called by a scheduler or manually)."""
        try:
            result = container.auto_attendance_service.run()
        except RetrievalError as e:
            logger.error("Auto attendance check failed: %s", e, exc_info=True)
            return jsonify({"success": False, "message": str(e)}), 500
        except Exception as e:
            logger.exception("Unexpected error in auto attendance check")
            return jsonify({"success": False, "message": str(e) or "Unknown error"}), 500

        return jsonify(result.to_dict()), 200
