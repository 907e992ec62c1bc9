"""
People Routes - Endpoints to manage contacts and their tags
"""

from flask import Blueprint, current_app, request
from api_responses import success_response, error_response, handle_api_errors, get_json_body, ErrorCode
from auth import access_required
from models.user import ACCESS_CONTACTS
from services.import_reconciler import read_name_pairs
import logging

# Retrieve main logger
logger = logging.getLogger("main")

people_bp = Blueprint("people", __name__, url_prefix="/api")


@people_bp.route("/people")
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def list_people_api():
    """Every person, newest first"""
    people = current_app.contacts.people.list_people()
    return success_response(data=[p.to_dict() for p in people])


@people_bp.route("/people", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def add_person_api():
    data = get_json_body()
    person = current_app.contacts.people.add_person(
        data.get("firstname"),
        data.get("lastname"),
        data.get("tags") or [],
    )
    return success_response(data=person.to_dict(), message="Person added", status_code=201)


@people_bp.route("/people/<int:person_id>")
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def get_person_api(person_id):
    person = current_app.contacts.people.get_person(person_id)
    return success_response(data=person.to_dict())


@people_bp.route("/people/<int:person_id>", methods=["PUT"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def update_person_api(person_id):
    """Full replacement of names and tags"""
    data = get_json_body()
    person = current_app.contacts.people.update_person(
        person_id,
        data.get("firstname"),
        data.get("lastname"),
        data.get("tags") or [],
    )
    return success_response(data=person.to_dict(), message="Person updated")


@people_bp.route("/people/<int:person_id>", methods=["DELETE"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def delete_person_api(person_id):
    deleted = current_app.contacts.people.delete_person(person_id)
    return success_response(data={"deleted": 1 if deleted else 0}, message="Person deleted")


@people_bp.route("/people/delete", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def delete_people_api():
    data = get_json_body()
    ids = data.get("ids")
    if not isinstance(ids, list):
        return error_response(ErrorCode.VALIDATION_ERROR, message="ids must be a list of person ids")

    deleted = current_app.contacts.people.delete_people(ids)
    return success_response(data={"deleted": deleted}, message=f"{deleted} people deleted")


@people_bp.route("/people/import", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def import_people_api():
    """
    Import people from a JSON list of {firstname, lastname} objects or from
    an uploaded two column CSV file. Known people are skipped.
    """
    if "file" in request.files:
        upload = request.files["file"]
        pairs = read_name_pairs(upload.read())
        source = upload.filename or "upload"
    else:
        data = get_json_body()
        entries = data.get("people")
        if not isinstance(entries, list):
            return error_response(ErrorCode.VALIDATION_ERROR, message="people must be a list")
        pairs = [
            (entry.get("firstname"), entry.get("lastname")) if isinstance(entry, dict) else entry
            for entry in entries
        ]
        source = "json"

    result = current_app.contacts.people.import_people(pairs)
    logger.info(f"Imported {len(result.added)} people from {source}")
    return success_response(
        data=result.to_dict(),
        message=f"{len(result.added)} added, {result.duplicates} already known",
    )
