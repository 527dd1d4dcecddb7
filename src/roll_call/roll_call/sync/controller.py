from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.validators import require_non_empty
from ..core.exceptions import RemoteReadFailed, StorageUnavailable
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    synchronizer = container.synchronizer

    @app.route("/api/offline/status", methods=["GET"], endpoint="offline_status")
    def offline_status():
        return jsonify(
            {
                "online": container.connectivity.is_online(),
                "pending": synchronizer.pending_count(),
                "unreadable": container.pending_queue.unreadable_count(),
                "syncing": synchronizer.busy,
                "draft_degraded": container.draft_store.degraded,
                "recent": [r.to_dict() for r in container.notifier.recent()],
            }
        )

    @app.route("/api/offline/sync", methods=["POST"], endpoint="offline_sync")
    def offline_sync():
        passes = synchronizer.completed_passes
        container.connectivity.refresh()
        if synchronizer.completed_passes != passes and synchronizer.last_result is not None:
            # coming back online already ran a pass
            result = synchronizer.last_result
        else:
            result = synchronizer.sync()
        status = 200 if result.success else (409 if result.error_code == "sync_in_progress" else 503)
        return jsonify(result.to_dict()), status

    @app.route("/api/offline/baixar", methods=["POST"], endpoint="offline_download")
    def offline_download():
        data = request.get_json(silent=True) or {}
        school_id = require_non_empty(data.get("school_id", ""), "Escola")
        try:
            result = container.roster_cache.download(school_id)
        except (RemoteReadFailed, StorageUnavailable):
            logger.warning("Offline data download failed for school %s", school_id, exc_info=True)
            return jsonify({"success": False, "message": "Não foi possível baixar os dados."}), 503
        message = f"{result.classes_count} turmas e {result.students_count} alunos prontos para uso offline."
        return jsonify({"success": True, "message": message, **result.to_dict()})
