"""
System Routes - health, stats and settings endpoints
"""

from flask import Blueprint
from sqlalchemy import text
from db import db
from api_responses import success_response, error_response, handle_api_errors, get_json_body, ErrorCode
from repositories.person_repository import PersonRepository
from repositories.tag_repository import TagRepository
from settings import load_settings, verify_settings, set_generation_settings, set_auth_settings
from auth import access_required
from models.user import ACCESS_ADMIN, ACCESS_CONTACTS
from utils import now_utc
from constants import BUILD_VERSION
import logging
import socket

# Retrieve main logger
logger = logging.getLogger("main")

system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.route("/health", methods=["GET"])
@handle_api_errors
def health_check_api():
    """
    Health check endpoint for monitoring.
    """
    overall_status = "healthy"
    checks = {
        "timestamp": now_utc().isoformat(),
        "version": BUILD_VERSION,
        "hostname": socket.gethostname(),
        "database": "unknown",
    }

    # Check Database connection
    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        checks["database"] = f"error: {str(e)}"
        overall_status = "unhealthy"

    status_code = 200 if overall_status == "healthy" else 503

    return success_response(data={"status": overall_status, "checks": checks}, status_code=status_code)


@system_bp.route("/health/live", methods=["GET"])
@handle_api_errors
def health_live_api():
    """
    Liveness probe - checks if the application is alive.
    """
    return success_response(data={"status": "alive", "timestamp": now_utc().isoformat()})


@system_bp.route("/stats")
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def get_stats():
    """People, tags per category and solicitations so far"""
    return success_response(
        data={
            "people": PersonRepository.count(),
            "tags": TagRepository.count(),
            "tags_per_category": TagRepository.count_by_category(),
            "solicitations": PersonRepository.total_solicitations(),
        }
    )


@system_bp.route("/settings")
@access_required(ACCESS_ADMIN)
@handle_api_errors
def get_settings_api():
    settings = load_settings()
    return success_response(data={"auth": settings["auth"], "generation": settings["generation"]})


@system_bp.route("/settings/generation", methods=["POST"])
@access_required(ACCESS_ADMIN)
@handle_api_errors
def set_generation_settings_api():
    data = get_json_body()
    success, errors = verify_settings("generation", data)
    if not success:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Invalid settings", details={"errors": errors})

    set_generation_settings(record_solicitations=data.get("record_solicitations"))
    return success_response(data=load_settings()["generation"], message="Settings saved")


@system_bp.route("/settings/auth", methods=["POST"])
@access_required(ACCESS_ADMIN)
@handle_api_errors
def set_auth_settings_api():
    data = get_json_body()
    success, errors = verify_settings("auth", data)
    if not success:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Invalid settings", details={"errors": errors})

    set_auth_settings(login_rate_limit=data.get("login_rate_limit"))
    return success_response(data=load_settings()["auth"], message="Settings saved")
