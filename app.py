from flask import Flask, request, render_template, Response, jsonify

from error_log import log_error
from metadata_scanner import scan
from save_pipeline import SaveError, save
from site_config import SITE_CONFIG, ADMIN_HOST, ADMIN_PORT, store_paths

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = SITE_CONFIG["max_request_mb"] * 1024 * 1024
app.config["STORE_PATHS"] = store_paths()


# ── Inject site config into every template automatically ──────────────────────
@app.context_processor
def inject_globals():
    return {"site": SITE_CONFIG}


# ── JSON errors for requests the routes never see ─────────────────────────────
@app.errorhandler(413)
def request_too_large(e):
    limit = SITE_CONFIG["max_request_mb"]
    return jsonify(error=f"Request too large (limit {limit} MB)"), 413


# ── Routes ────────────────────────────────────────────────────────────────────

@app.route("/robots.txt")
def robots_txt():
    return Response("User-agent: *\nDisallow: /\n", mimetype="text/plain")


@app.route("/")
def index():
    return render_template("admin.html")


@app.route("/api/metadata")
def metadata():
    return jsonify(scan(app.config["STORE_PATHS"]["records"]))


@app.route("/api/save", methods=["POST"])
def save_miniature():
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify(error="Request body must be JSON"), 400

    try:
        result = save(payload, app.config["STORE_PATHS"])
    except SaveError as e:
        return jsonify(error=str(e)), e.status
    except Exception as e:
        # Photos written before the failure are left on disk
        log_error("save", e)
        return jsonify(error=str(e)), 500

    return jsonify(result)


if __name__ == "__main__":
    print(f"Admin tool running at http://{ADMIN_HOST}:{ADMIN_PORT}")
    app.run(host=ADMIN_HOST, port=ADMIN_PORT)
