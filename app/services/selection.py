"""
Selection of people for bulk actions, and the working set of tag names
chosen in the bulk edit dialog.
"""


class SelectionManager:
    """Set of selected person ids, independent of filtering"""

    def __init__(self, ids=None):
        self._ids = set()
        for person_id in ids or ():
            self._ids.add(int(person_id))

    def toggle(self, person_id) -> bool:
        """Flip the selection of one person; returns True when now selected"""
        person_id = int(person_id)
        if person_id in self._ids:
            self._ids.remove(person_id)
            return False
        self._ids.add(person_id)
        return True

    def select_all(self, ids):
        """Select exactly the given (visible) ids"""
        self._ids = {int(person_id) for person_id in ids}

    def clear(self):
        self._ids = set()

    def is_selected(self, person_id) -> bool:
        return int(person_id) in self._ids

    def discard_missing(self, existing_ids):
        """Forget ids that are no longer known"""
        self._ids &= {int(person_id) for person_id in existing_ids}

    @property
    def ids(self):
        return sorted(self._ids)

    def __len__(self):
        return len(self._ids)

    def __bool__(self):
        return bool(self._ids)

    def __contains__(self, person_id):
        return self.is_selected(person_id)

    def to_list(self):
        return self.ids

    @classmethod
    def from_list(cls, data):
        return cls(data or [])


class TagWorkingSet:
    """Tag names picked in the bulk edit dialog, in the order they were picked"""

    def __init__(self, names=None):
        self._names = []
        for name in names or ():
            self.add(name)

    def add(self, name):
        name = name.strip()
        if name and name not in self._names:
            self._names.append(name)

    def toggle(self, name) -> bool:
        name = name.strip()
        if name in self._names:
            self._names.remove(name)
            return False
        self.add(name)
        return bool(name)

    def clear(self):
        self._names = []

    @property
    def names(self):
        return list(self._names)

    def __len__(self):
        return len(self._names)

    def __bool__(self):
        return bool(self._names)

    def to_list(self):
        return self.names

    @classmethod
    def from_list(cls, data):
        return cls(data or [])
