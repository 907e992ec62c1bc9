"""
Tags Routes - Endpoints to manage tags, their category and priority
"""

from flask import Blueprint, current_app, request
from api_responses import success_response, handle_api_errors, get_json_body
from auth import access_required
from models.user import ACCESS_CONTACTS
from constants import TAG_CATEGORIES, UNCATEGORIZED
from exceptions import DuplicateException, ValidationException
from services.tag_store import validate_category
import logging

# Retrieve main logger
logger = logging.getLogger("main")

tags_bp = Blueprint("tags", __name__, url_prefix="/api")


def _tag_payload(tag, usage):
    data = tag.to_dict()
    data["people"] = usage.get(tag.id, 0)
    return data


@tags_bp.route("/tags")
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def list_tags_api():
    """Tags in display order; ?grouped=1 groups them by category"""
    store = current_app.contacts.tags
    usage = store.usage_counts()

    if request.args.get("grouped") in ("1", "true"):
        grouped = store.tags_by_category()
        return success_response(
            data=[
                {"category": category, "tags": [_tag_payload(t, usage) for t in tags]}
                for category, tags in grouped.items()
            ]
        )

    return success_response(data=[_tag_payload(t, usage) for t in store.list_tags()])


@tags_bp.route("/tags/categories")
@access_required(ACCESS_CONTACTS)
def list_categories_api():
    return success_response(data=TAG_CATEGORIES)


@tags_bp.route("/tags", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def create_tag_api():
    """
    Create a tag. With ?ensure=1 an existing tag with the same name (any
    case) is returned instead of a conflict.
    """
    data = get_json_body()
    store = current_app.contacts.tags
    try:
        tag = store.create_tag(data.get("name"), data.get("category") or UNCATEGORIZED)
    except DuplicateException as e:
        if request.args.get("ensure") not in ("1", "true"):
            raise
        return success_response(data=e.existing.to_dict(), message="Tag already exists")

    return success_response(data=tag.to_dict(), message="Tag created", status_code=201)


@tags_bp.route("/tags/<path:name>", methods=["PUT"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def update_tag_api(name):
    """Rename a tag and/or change its category and priority"""
    data = get_json_body()
    store = current_app.contacts.tags

    # Validate everything before the first write
    if "category" in data:
        validate_category(data["category"])
    if "is_priority" in data and not isinstance(data["is_priority"], bool):
        raise ValidationException("is_priority must be a boolean", field="is_priority")

    tag = store.get_tag(name)
    if data.get("name"):
        tag = store.rename_tag(tag.name, data["name"])
    if "category" in data:
        tag = store.set_category(tag.name, data["category"])
    if "is_priority" in data:
        tag = store.set_priority(tag.name, data["is_priority"])

    return success_response(data=tag.to_dict(), message="Tag updated")


@tags_bp.route("/tags/<path:name>", methods=["DELETE"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def delete_tag_api(name):
    """Delete a tag and remove it from everyone carrying it"""
    removed_from = current_app.contacts.tags.delete_tag(name)
    return success_response(data={"name": name, "people": removed_from}, message="Tag deleted")
