"""
Import reconciler: merge externally supplied (firstname, lastname) pairs into
the list of people, skipping anyone already known.
"""
import csv
import io
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from models.person import Person


def identity_key(firstname, lastname) -> Tuple[str, str]:
    """Duplicate detection key: both names trimmed and case-folded"""
    return ((firstname or "").strip().casefold(), (lastname or "").strip().casefold())


@dataclass
class ImportResult:
    people: List[Person] = field(default_factory=list)
    added: List[Person] = field(default_factory=list)
    duplicates: int = 0
    invalid: int = 0

    def to_dict(self):
        return {
            "added": len(self.added),
            "duplicates": self.duplicates,
            "invalid": self.invalid,
            "people": [p.to_dict() for p in self.added],
        }


class ImportReconciler:
    """Pure merge of imported name pairs against existing people"""

    def merge(self, existing_people: Iterable[Person], imported_pairs: Iterable) -> ImportResult:
        existing_people = list(existing_people)
        known = {identity_key(p.firstname, p.lastname) for p in existing_people}
        result = ImportResult(people=list(existing_people))

        for pair in imported_pairs:
            if isinstance(pair, str):
                result.invalid += 1
                continue
            try:
                firstname, lastname = pair
            except (TypeError, ValueError):
                result.invalid += 1
                continue
            if not isinstance(firstname, str) or not isinstance(lastname, str):
                result.invalid += 1
                continue

            firstname, lastname = firstname.strip(), lastname.strip()
            if not firstname or not lastname:
                result.invalid += 1
                continue

            key = identity_key(firstname, lastname)
            if key in known:
                result.duplicates += 1
                continue
            known.add(key)

            person = Person(firstname=firstname, lastname=lastname, tags=[], solicitation_count=0)
            result.added.append(person)
            result.people.append(person)

        return result


def read_name_pairs(stream) -> List[Tuple[str, str]]:
    """
    Read a header-less two column CSV (firstname,lastname).
    Lines missing either column are dropped.
    """
    if isinstance(stream, bytes):
        stream = stream.decode("utf-8-sig")
    if isinstance(stream, str):
        stream = io.StringIO(stream)

    pairs = []
    for row in csv.reader(stream):
        if len(row) < 2:
            continue
        firstname, lastname = row[0].strip(), row[1].strip()
        if firstname and lastname:
            pairs.append((firstname, lastname))
    return pairs
