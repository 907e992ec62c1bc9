"""
Filter engine for the generation page.

A person is part of the result when:
  - at least one included tag is on the person,
  - no excluded tag is on the person,
  - solicitation_count <= max_solicitations (when set),
  - last_solicitation_date is empty or not after solicited_before (when set).

With no included tag the result is empty: filtering needs at least one
positive tag criterion.
"""
from datetime import date, datetime
from typing import Dict, List, Optional

from constants import TAG_STATE_EXCLUDE, TAG_STATE_INCLUDE, TAG_STATE_NEUTRAL, TAG_STATES
from exceptions import ValidationException
from utils import parse_date

# neutral -> include -> exclude -> neutral
NEXT_TAG_STATE = {
    TAG_STATE_NEUTRAL: TAG_STATE_INCLUDE,
    TAG_STATE_INCLUDE: TAG_STATE_EXCLUDE,
    TAG_STATE_EXCLUDE: TAG_STATE_NEUTRAL,
}


def render_as_handles(people) -> str:
    """'@Firstname Lastname' tokens separated by single spaces"""
    return " ".join(f"@{p.firstname} {p.lastname}" for p in people)


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


class FilterEngine:
    def __init__(self, tag_states: Optional[Dict[str, str]] = None, max_solicitations=None, solicited_before=None):
        self.tag_states: Dict[str, str] = {}
        self.max_solicitations: Optional[int] = None
        self.solicited_before: Optional[date] = None

        for name, state in (tag_states or {}).items():
            self.set_tag_state(name, state)
        self.set_max_solicitations(max_solicitations)
        self.set_solicited_before(solicited_before)

    def get_tag_state(self, name: str) -> str:
        return self.tag_states.get(name, TAG_STATE_NEUTRAL)

    def set_tag_state(self, name: str, next_state: Optional[str] = None) -> str:
        """
        Without next_state, cycle the tag neutral -> include -> exclude -> neutral.
        Returns the state the tag ends up in.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationException("Tag name cannot be empty", field="name")
        name = name.strip()

        if next_state is None:
            next_state = NEXT_TAG_STATE[self.get_tag_state(name)]
        elif next_state not in TAG_STATES:
            raise ValidationException(f"Unknown tag state: {next_state}", field="state")

        if next_state == TAG_STATE_NEUTRAL:
            self.tag_states.pop(name, None)
        else:
            self.tag_states[name] = next_state
        return next_state

    def set_max_solicitations(self, value):
        if value is None or value == "":
            self.max_solicitations = None
            return
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ValidationException("max_solicitations must be an integer", field="max_solicitations")
        try:
            value = int(value)
        except (TypeError, ValueError):
            raise ValidationException("max_solicitations must be an integer", field="max_solicitations")
        if value < 0:
            raise ValidationException("max_solicitations cannot be negative", field="max_solicitations")
        self.max_solicitations = value

    def set_solicited_before(self, value):
        try:
            self.solicited_before = parse_date(value)
        except ValueError as e:
            raise ValidationException(str(e), field="solicited_before")

    def reset(self):
        self.tag_states = {}
        self.max_solicitations = None
        self.solicited_before = None

    @property
    def included_tags(self) -> List[str]:
        return sorted(name for name, state in self.tag_states.items() if state == TAG_STATE_INCLUDE)

    @property
    def excluded_tags(self) -> List[str]:
        return sorted(name for name, state in self.tag_states.items() if state == TAG_STATE_EXCLUDE)

    def matches(self, person) -> bool:
        included = set(self.included_tags)
        if not included:
            return False

        tags = set(person.tag_names)
        if not tags & included:
            return False
        if tags & set(self.excluded_tags):
            return False

        if self.max_solicitations is not None and (person.solicitation_count or 0) > self.max_solicitations:
            return False

        if self.solicited_before is not None:
            last = _as_date(person.last_solicitation_date)
            if last is not None and last > self.solicited_before:
                return False

        return True

    def compute_result(self, all_people) -> list:
        """People matching the filter, in the order they were given"""
        if not self.included_tags:
            return []
        return [person for person in all_people if self.matches(person)]

    def render_as_handles(self, people) -> str:
        return render_as_handles(people)

    def to_dict(self):
        return {
            "tag_states": dict(self.tag_states),
            "max_solicitations": self.max_solicitations,
            "solicited_before": self.solicited_before.isoformat() if self.solicited_before else None,
        }

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            tag_states=data.get("tag_states"),
            max_solicitations=data.get("max_solicitations"),
            solicited_before=data.get("solicited_before"),
        )
