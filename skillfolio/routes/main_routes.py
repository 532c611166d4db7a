# Import Flask routing primitives for service endpoints.
from flask import Blueprint, jsonify

# This Blueprint groups service-level routes.
main_bp = Blueprint("main", __name__)


# Lightweight health check endpoint for uptime monitoring.
@main_bp.route("/api/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"}), 200
