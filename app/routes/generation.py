"""
Generation Routes - Filter people by tags, select them, bulk edit their tags
and produce the @-handle text to paste into a post.

The filter, the selection and the bulk edit working set live in the user's
Flask session.
"""

from flask import Blueprint, current_app, session
from api_responses import success_response, error_response, handle_api_errors, get_json_body, ErrorCode
from auth import access_required
from models.user import ACCESS_CONTACTS
from exceptions import PersistenceException
from metrics import handles_generated_total
from services.filter_engine import render_as_handles
from services.generation import GenerationSession
from settings import load_settings
import logging

# Retrieve main logger
logger = logging.getLogger("main")

generation_bp = Blueprint("generation", __name__, url_prefix="/api/generation")


def _load():
    """Session state plus the current list of people, stale ids and tags dropped"""
    people = current_app.contacts.people.list_people()
    generation = GenerationSession.load(session)
    generation.sync_tags(current_app.contacts.tags.list_tags())
    generation.selection.discard_missing(p.id for p in people)
    return generation, people


def _state(generation, people):
    visible = generation.visible_people(people)
    tags = []
    for tag in current_app.contacts.tags.list_tags():
        data = tag.to_dict()
        data["state"] = generation.engine.get_tag_state(tag.name)
        tags.append(data)

    return {
        "filter": generation.engine.to_dict(),
        "tags": tags,
        "people": [p.to_dict() for p in visible],
        "handles": render_as_handles(visible),
        "selection": generation.selection.to_list(),
        "working_set": generation.working_set.to_list(),
    }


def _respond(generation, people, message=None):
    generation.save(session)
    return success_response(data=_state(generation, people), message=message)


@generation_bp.route("")
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def get_generation_api():
    generation, people = _load()
    return _respond(generation, people)


@generation_bp.route("/tags/<path:name>/toggle", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def toggle_tag_api(name):
    """Cycle a tag neutral -> include -> exclude, or set {"state": ...}"""
    data = get_json_body()
    tag = current_app.contacts.tags.get_tag(name)
    generation, people = _load()
    state = generation.toggle_tag(tag.name, data.get("state"), tag_id=tag.id)
    return _respond(generation, people, message=f"{tag.name}: {state}")


@generation_bp.route("/filters", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def set_filters_api():
    """Set max_solicitations and/or solicited_before; null clears them"""
    data = get_json_body()
    generation, people = _load()
    if "max_solicitations" in data:
        generation.set_max_solicitations(data["max_solicitations"])
    if "solicited_before" in data:
        generation.set_solicited_before(data["solicited_before"])
    return _respond(generation, people)


@generation_bp.route("/reset", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def reset_filters_api():
    generation, people = _load()
    generation.reset_filters()
    return _respond(generation, people, message="Filters reset")


@generation_bp.route("/selection/toggle/<int:person_id>", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def toggle_selection_api(person_id):
    person = current_app.contacts.people.get_person(person_id)
    generation, people = _load()
    generation.selection.toggle(person.id)
    return _respond(generation, people)


@generation_bp.route("/selection/all", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def select_all_api():
    """Select every person currently visible"""
    generation, people = _load()
    generation.select_all_visible(people)
    return _respond(generation, people)


@generation_bp.route("/selection/clear", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def clear_selection_api():
    generation, people = _load()
    generation.selection.clear()
    return _respond(generation, people)


@generation_bp.route("/selection/handles")
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def selection_handles_api():
    generation, people = _load()
    selected = generation.selected_people(people)
    generation.save(session)
    return success_response(
        data={
            "people": [p.to_dict() for p in selected],
            "handles": render_as_handles(selected),
        }
    )


@generation_bp.route("/selection/delete", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def delete_selection_api():
    generation, people = _load()
    if not generation.selection:
        return error_response(ErrorCode.VALIDATION_ERROR, message="No people selected")

    deleted = current_app.contacts.people.delete_people(generation.selection.ids)
    generation.selection.clear()
    people = current_app.contacts.people.list_people()
    return _respond(generation, people, message=f"{deleted} people deleted")


@generation_bp.route("/working-set/toggle/<path:name>", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def toggle_working_set_api(name):
    generation, people = _load()
    generation.working_set.toggle(name)
    return _respond(generation, people)


@generation_bp.route("/bulk-tags", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def bulk_tags_api():
    """
    Add or remove tags on every selected person. Without "tags" the working
    set is used. A partial failure keeps the selection and answers 500 with
    failed_ids / applied_ids in details.
    """
    data = get_json_body()
    generation, people = _load()
    result = current_app.contacts.bulk_tags.apply_to_selection(
        generation.selection,
        data.get("tags"),
        data.get("mode"),
        working_set=generation.working_set,
    )
    people = current_app.contacts.people.list_people()
    generation.save(session)
    state = _state(generation, people)
    state["result"] = result.to_dict()
    return success_response(data=state, message=f"Bulk {result.mode} applied to {len(result.applied_ids)} people")


@generation_bp.route("/copy", methods=["POST"])
@access_required(ACCESS_CONTACTS)
@handle_api_errors
def copy_handles_api():
    """
    Produce the handle text for the filter result (or {"source": "selection"})
    and record one solicitation for each person in it. Recording is best
    effort: a failure is logged and the text is returned anyway.
    """
    data = get_json_body()
    generation, people = _load()
    if data.get("source") == "selection":
        chosen = generation.selected_people(people)
    else:
        chosen = generation.visible_people(people)
    generation.save(session)

    text = render_as_handles(chosen)
    handles_generated_total.inc(len(chosen))

    recorded = False
    if chosen and load_settings()["generation"]["record_solicitations"]:
        try:
            current_app.contacts.people.record_solicitation([p.id for p in chosen])
            recorded = True
        except PersistenceException as e:
            logger.error(f"Could not record solicitation for {len(chosen)} people: {e.message}")

    return success_response(data={"text": text, "count": len(chosen), "solicitation_recorded": recorded})
