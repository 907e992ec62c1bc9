"""
Per-session state of the generation page: filter, selection and the bulk
edit working set, stored in the Flask session between requests.

The filter holds tag names; the id of each filtered tag is kept next to it
so the filter follows renames and forgets deleted tags.
"""
from constants import GENERATION_SESSION_KEY, TAG_STATE_NEUTRAL
from services.filter_engine import FilterEngine, render_as_handles
from services.selection import SelectionManager, TagWorkingSet


class GenerationSession:
    def __init__(self, engine=None, selection=None, working_set=None, tag_ids=None):
        self.engine = engine or FilterEngine()
        self.selection = selection or SelectionManager()
        self.working_set = working_set or TagWorkingSet()
        self.tag_ids = dict(tag_ids or {})

    @classmethod
    def load(cls, session):
        data = session.get(GENERATION_SESSION_KEY) or {}
        return cls(
            engine=FilterEngine.from_dict(data.get("filter")),
            selection=SelectionManager.from_list(data.get("selection")),
            working_set=TagWorkingSet.from_list(data.get("working_set")),
            tag_ids=data.get("tag_ids"),
        )

    def save(self, session):
        session[GENERATION_SESSION_KEY] = self.to_dict()

    def to_dict(self):
        return {
            "filter": self.engine.to_dict(),
            "selection": self.selection.to_list(),
            "working_set": self.working_set.to_list(),
            "tag_ids": dict(self.tag_ids),
        }

    def sync_tags(self, tags):
        """
        Re-key the tag filter on the current tags: a renamed tag keeps its
        state under the new name, a deleted tag goes back to neutral.
        A dropped state clears the selection.
        Returns True when anything changed.
        """
        names_by_id = {tag.id: tag.name for tag in tags}
        known_names = set(names_by_id.values())

        states = {}
        tag_ids = {}
        dropped = False
        for name, state in self.engine.tag_states.items():
            tag_id = self.tag_ids.get(name)
            if tag_id is None:
                current = name if name in known_names else None
            else:
                current = names_by_id.get(tag_id)
            if current is None:
                dropped = True
                continue
            states[current] = state
            if tag_id is not None:
                tag_ids[current] = tag_id

        changed = dropped or states != self.engine.tag_states or tag_ids != self.tag_ids
        self.engine.tag_states = states
        self.tag_ids = tag_ids
        if dropped:
            self.selection.clear()
        return changed

    # Any filter change drops the selection
    def toggle_tag(self, name, next_state=None, tag_id=None):
        state = self.engine.set_tag_state(name, next_state)
        name = name.strip()
        if state == TAG_STATE_NEUTRAL:
            self.tag_ids.pop(name, None)
        elif tag_id is not None:
            self.tag_ids[name] = tag_id
        self.selection.clear()
        return state

    def set_max_solicitations(self, value):
        self.engine.set_max_solicitations(value)
        self.selection.clear()

    def set_solicited_before(self, value):
        self.engine.set_solicited_before(value)
        self.selection.clear()

    def reset_filters(self):
        self.engine.reset()
        self.tag_ids = {}
        self.selection.clear()

    def visible_people(self, people):
        return self.engine.compute_result(people)

    def handles(self, people):
        return render_as_handles(self.visible_people(people))

    def select_all_visible(self, people):
        self.selection.select_all(p.id for p in self.visible_people(people))

    def selected_people(self, people):
        return [p for p in people if p.id in self.selection]

    def selection_handles(self, people):
        return render_as_handles(self.selected_people(people))
