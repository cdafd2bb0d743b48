import logging
from flask import Flask, Response, jsonify, request
from utils.file_manager import ensure_defaults, get_config, goal_amount, log_level, update_config
from models.records import RecordNotFound, RecordStore
from models.aggregation import compute_monthly, compute_weekly, sum_periods, summarize
from models.csv_codec import ImportFormatError, export_csv, export_filename, import_csv
from sample_data import load_sample

LOG = logging.getLogger(__name__)


def create_app(store: RecordStore = None) -> Flask:
    ensure_defaults()
    logging.basicConfig(level=log_level())
    app = Flask(__name__)
    store = store if store is not None else RecordStore()
    app.extensions["record_store"] = store

    def _not_found(record_id):
        return jsonify({"ok": False, "error": f"Unknown record: {record_id}"}), 404

    def _json_object():
        data = request.get_json(force=True, silent=True)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object.")
        return data

    @app.get("/status")
    def status():
        daily = store.computed()
        weeks = compute_weekly(daily)
        return jsonify({
            "records": len(daily),
            "weeks": len(weeks),
            "months": len(compute_monthly(weeks)),
            "goal_amount": goal_amount(),
        })

    # -------- Records --------
    @app.get("/records")
    def records_get():
        return jsonify({"ok": True, "records": store.all()})

    @app.post("/records")
    def records_add():
        try:
            rec = store.add(_json_object())
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400
        return jsonify({"ok": True, "record": rec}), 201

    @app.patch("/records/<record_id>")
    def records_update(record_id):
        try:
            data = _json_object()
            # accept {"field": ..., "value": ...} as well as a dict of fields
            if "field" in data and "value" in data:
                data = {str(data["field"]): data["value"]}
            rec = store.update(record_id, data)
        except RecordNotFound:
            return _not_found(record_id)
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400
        return jsonify({"ok": True, "record": rec})

    @app.delete("/records/<record_id>")
    def records_delete(record_id):
        try:
            rec = store.delete(record_id)
        except RecordNotFound:
            return _not_found(record_id)
        return jsonify({"ok": True, "deleted": rec["id"]})

    @app.post("/records/clear")
    def records_clear():
        store.clear()
        return jsonify({"ok": True})

    @app.post("/records/sample")
    def records_sample():
        try:
            data = _json_object()
            days = int(data["days"]) if "days" in data else None
            count = load_sample(store, days)
        except (TypeError, ValueError) as e:
            return jsonify({"ok": False, "error": str(e)}), 400
        return jsonify({"ok": True, "loaded": count})

    # -------- Aggregates --------
    @app.get("/daily")
    def daily():
        return jsonify({"ok": True, "daily": store.computed()})

    @app.get("/weekly")
    def weekly():
        weeks = store.weekly()
        return jsonify({"ok": True, "weekly": weeks, "totals": sum_periods(weeks)})

    @app.get("/monthly")
    def monthly():
        months = store.monthly()
        return jsonify({"ok": True, "monthly": months, "totals": sum_periods(months)})

    @app.get("/summary")
    def summary():
        goal = goal_amount()
        return jsonify({"ok": True, "summary": summarize(store.computed(goal), goal)})

    # -------- CSV --------
    @app.get("/export.csv")
    def export():
        prefix = get_config()["export"].get("filename_prefix", "financial-tracker")
        return Response(
            export_csv(store.computed()),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={export_filename(prefix=prefix)}"},
        )

    @app.post("/import")
    def import_endpoint():
        upload = request.files.get("file")
        payload = upload.read() if upload else request.get_data()
        if not payload:
            return jsonify({"ok": False, "error": "Provide a CSV file."}), 400
        try:
            result = import_csv(store, payload)
        except ImportFormatError as e:
            LOG.warning("CSV import failed: %s", e)
            return jsonify({"ok": False, "error": "Failed to parse CSV file. Please check the format."}), 400
        return jsonify({"ok": True, "imported": len(result.records), "dropped": result.dropped})

    # -------- Admin --------
    @app.get("/config")
    def config_get():
        return jsonify({"ok": True, "config": get_config()})

    @app.post("/config")
    def config_update():
        try:
            changed = update_config(_json_object())
        except ValueError as e:
            return jsonify({"ok": False, "error": str(e)}), 400
        return jsonify({"ok": True, "changed": changed, "config": get_config()})

    return app


if __name__ == "__main__":
    # Running directly: start Flask dev server
    create_app().run(host="0.0.0.0", port=5000, debug=True)
