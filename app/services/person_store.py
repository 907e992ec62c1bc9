"""
Person store: people records and their tag sets.
"""
from typing import Iterable, List, Optional

import structlog

from constants import NAME_MAX_LENGTH
from db import db, transaction
from exceptions import NotFoundException, ValidationException
from metrics import track_db_query, people_solicited_total
from models.person import Person
from repositories.person_repository import PersonRepository
from services.import_reconciler import ImportReconciler, ImportResult
from services.tag_store import TagStore
from utils import now_utc

logger = structlog.get_logger('person_store')


def normalize_name(value, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationException(f"{field} must be a string", field=field)
    value = value.strip()
    if not value:
        raise ValidationException(f"{field} cannot be empty", field=field)
    if len(value) > NAME_MAX_LENGTH:
        raise ValidationException(f"{field} is longer than {NAME_MAX_LENGTH} characters", field=field)
    return value


def normalize_tag_names(tag_names) -> List[str]:
    if tag_names is None:
        return []
    if isinstance(tag_names, str) or not isinstance(tag_names, (list, tuple, set, frozenset)):
        raise ValidationException("tags must be a list of tag names", field="tags")
    names = []
    for name in tag_names:
        if not isinstance(name, str) or not name.strip():
            raise ValidationException("Tag names must be non-empty strings", field="tags")
        names.append(name.strip())
    return names


def normalize_person_id(person_id) -> int:
    try:
        return int(person_id)
    except (TypeError, ValueError):
        raise ValidationException(f"Invalid person id: {person_id!r}", field="id")


class PersonStore:
    """Create, update and delete people"""

    def __init__(self, tag_store: TagStore, reconciler: Optional[ImportReconciler] = None, database=db):
        self.tag_store = tag_store
        self.reconciler = reconciler or ImportReconciler()
        self.db = database

    def list_people(self) -> List[Person]:
        return PersonRepository.get_all()

    def get_person(self, person_id) -> Person:
        person_id = normalize_person_id(person_id)
        person = PersonRepository.get_by_id(person_id)
        if not person:
            raise NotFoundException("Person", person_id)
        return person

    def get_people(self, ids: Iterable) -> List[Person]:
        """People for the given ids, in list order; unknown ids are skipped"""
        wanted = {normalize_person_id(i) for i in ids}
        return [p for p in self.list_people() if p.id in wanted]

    @track_db_query("add_person")
    def add_person(self, firstname: str, lastname: str, tag_names=()) -> Person:
        firstname = normalize_name(firstname, "firstname")
        lastname = normalize_name(lastname, "lastname")
        tag_names = normalize_tag_names(tag_names)

        with transaction(f"Adding {firstname} {lastname}"):
            # Tags first so every name the person carries exists
            tags = self.tag_store.ensure_all(tag_names, commit=False)
            person = PersonRepository.add(
                firstname=firstname,
                lastname=lastname,
                tags=tags,
                solicitation_count=0,
                created_at=now_utc(),
            )

        logger.info(f"Person added: {firstname} {lastname}", person_id=person.id, tags=tag_names)
        return person

    @track_db_query("update_person")
    def update_person(self, person_id, firstname: str, lastname: str, tag_names=()) -> Person:
        firstname = normalize_name(firstname, "firstname")
        lastname = normalize_name(lastname, "lastname")
        tag_names = normalize_tag_names(tag_names)
        person = self.get_person(person_id)

        with transaction(f"Updating person {person.id}"):
            tags = self.tag_store.ensure_all(tag_names, commit=False)
            person.firstname = firstname
            person.lastname = lastname
            person.tags = tags

        logger.info(f"Person updated: {firstname} {lastname}", person_id=person.id)
        return person

    @track_db_query("delete_person")
    def delete_person(self, person_id) -> bool:
        """Delete one person; an unknown id is a no-op and returns False"""
        person = PersonRepository.get_by_id(normalize_person_id(person_id))
        if not person:
            logger.debug(f"Person {person_id} already absent")
            return False

        with transaction(f"Deleting person {person.id}"):
            PersonRepository.delete(person)
        logger.info(f"Person deleted: {person_id}")
        return True

    @track_db_query("delete_people")
    def delete_people(self, ids: Iterable) -> int:
        """Delete several people at once; returns how many existed"""
        people = PersonRepository.get_by_ids({normalize_person_id(i) for i in ids})
        if not people:
            return 0

        with transaction(f"Deleting {len(people)} people"):
            for person in people:
                PersonRepository.delete(person)
        logger.info(f"People deleted: {len(people)}")
        return len(people)

    @track_db_query("record_solicitation")
    def record_solicitation(self, ids: Iterable, when=None) -> int:
        """
        Count one more solicitation for every person and stamp the date.
        Raises PersistenceException when the write fails.
        """
        when = when or now_utc()
        people = PersonRepository.get_by_ids({normalize_person_id(i) for i in ids})
        if not people:
            return 0

        with transaction(f"Recording solicitation for {len(people)} people"):
            for person in people:
                person.solicitation_count = (person.solicitation_count or 0) + 1
                person.last_solicitation_date = when

        people_solicited_total.inc(len(people))
        logger.info(f"Solicitation recorded for {len(people)} people")
        return len(people)

    @track_db_query("import_people")
    def import_people(self, pairs) -> ImportResult:
        """Merge (firstname, lastname) pairs into the store, skipping duplicates"""
        result = self.reconciler.merge(self.list_people(), pairs)
        if result.added:
            with transaction(f"Importing {len(result.added)} people"):
                created_at = now_utc()
                for person in result.added:
                    person.created_at = created_at
                    self.db.session.add(person)
        logger.info(
            "Import finished",
            added=len(result.added),
            duplicates=result.duplicates,
            invalid=result.invalid,
        )
        return result
