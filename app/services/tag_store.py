"""
Tag store: the set of known tags and every operation that changes it.

Tags are referenced from people by id through the person_tag table, so a
rename keeps identity and every reference follows without touching people.
Name lookups for create/rename/ensure-exists ignore case; the stored name
keeps the case it was created with.
"""
from collections import OrderedDict
from typing import Dict, List

import structlog

from constants import TAG_CATEGORIES, UNCATEGORIZED, TAG_NAME_MAX_LENGTH
from db import db, transaction
from exceptions import DuplicateException, NotFoundException, ValidationException
from metrics import track_db_query
from models.tag import Tag
from repositories.persontag_repository import PersonTagRepository
from repositories.tag_repository import TagRepository

logger = structlog.get_logger('tag_store')


def normalize_tag_name(name) -> str:
    if not isinstance(name, str):
        raise ValidationException("Tag name must be a string", field="name")
    name = name.strip()
    if not name:
        raise ValidationException("Tag name cannot be empty", field="name")
    if len(name) > TAG_NAME_MAX_LENGTH:
        raise ValidationException(f"Tag name is longer than {TAG_NAME_MAX_LENGTH} characters", field="name")
    return name


def validate_category(category) -> str:
    if category is None:
        return UNCATEGORIZED
    if category not in TAG_CATEGORIES:
        raise ValidationException(f"Unknown tag category: {category}", field="category")
    return category


def tag_sort_key(tag):
    """Category (enumeration order), then priority first, then name"""
    try:
        category_index = TAG_CATEGORIES.index(tag.category or UNCATEGORIZED)
    except ValueError:
        category_index = len(TAG_CATEGORIES)
    return (category_index, not tag.is_priority, tag.name.casefold(), tag.name)


class TagStore:
    """Create, rename, delete and classify tags"""

    def __init__(self, database=db):
        self.db = database

    def get_tag(self, name: str) -> Tag:
        tag = TagRepository.find_by_name(normalize_tag_name(name))
        if not tag:
            raise NotFoundException("Tag", name)
        return tag

    def list_tags(self) -> List[Tag]:
        return sorted(TagRepository.get_all(), key=tag_sort_key)

    def tags_by_category(self) -> Dict[str, List[Tag]]:
        grouped = OrderedDict((category, []) for category in TAG_CATEGORIES)
        for tag in self.list_tags():
            grouped.setdefault(tag.category or UNCATEGORIZED, []).append(tag)
        return grouped

    def usage_counts(self) -> Dict[int, int]:
        return PersonTagRepository.usage_counts()

    @track_db_query("create_tag")
    def create_tag(self, name: str, category: str = UNCATEGORIZED) -> Tag:
        name = normalize_tag_name(name)
        category = validate_category(category)

        existing = TagRepository.find_by_name(name)
        if existing:
            raise DuplicateException(f"Tag '{existing.name}' already exists", existing=existing)

        with transaction(f"Creating tag {name}"):
            tag = TagRepository.add(name=name, category=category, is_priority=False)
        logger.info(f"Tag created: {name} ({category})")
        return tag

    def ensure_exists(self, name: str, commit: bool = True) -> Tag:
        """
        Return the tag called `name`, creating it (Uncategorized, not a
        priority) when unknown. With commit=False the new tag is only
        flushed and the caller's transaction decides its fate.
        """
        name = normalize_tag_name(name)
        existing = TagRepository.find_by_name(name)
        if existing:
            return existing

        if not commit:
            tag = TagRepository.add(name=name, category=UNCATEGORIZED, is_priority=False)
            logger.debug(f"Tag staged: {name}")
            return tag

        try:
            return self.create_tag(name)
        except DuplicateException as e:
            # Same net state, someone else created it first
            return e.existing

    def ensure_all(self, names, commit: bool = True) -> List[Tag]:
        """Resolve a list of names to tags, creating the unknown ones, without duplicates"""
        tags = []
        seen = set()
        for name in names or ():
            tag = self.ensure_exists(name, commit=commit)
            if tag.id not in seen:
                seen.add(tag.id)
                tags.append(tag)
        return tags

    @track_db_query("delete_tag")
    def delete_tag(self, name: str) -> int:
        """
        Remove the tag from every person, then remove the tag itself, all in
        one transaction. Returns the number of people that carried it.
        """
        tag = self.get_tag(name)
        tag_name = tag.name

        with transaction(f"Deleting tag {tag_name}"):
            people = tag.people.all()
            for person in people:
                person.tags.remove(tag)
            # References must be gone before the definition
            self.db.session.flush()
            TagRepository.delete(tag)

        logger.info(f"Tag deleted: {tag_name}", people=len(people))
        return len(people)

    @track_db_query("rename_tag")
    def rename_tag(self, old_name: str, new_name: str) -> Tag:
        tag = self.get_tag(old_name)
        new_name = normalize_tag_name(new_name)

        if new_name == tag.name:
            return tag

        existing = TagRepository.find_by_name(new_name)
        if existing and existing.id != tag.id:
            raise DuplicateException(f"Tag '{existing.name}' already exists", existing=existing)

        previous = tag.name
        with transaction(f"Renaming tag {previous}"):
            tag.name = new_name
        logger.info(f"Tag renamed: {previous} -> {new_name}")
        return tag

    def set_priority(self, name: str, is_priority: bool) -> Tag:
        tag = self.get_tag(name)
        with transaction(f"Updating priority of tag {tag.name}"):
            tag.is_priority = bool(is_priority)
        return tag

    def set_category(self, name: str, category: str) -> Tag:
        category = validate_category(category)
        tag = self.get_tag(name)
        with transaction(f"Updating category of tag {tag.name}"):
            tag.category = category
        return tag
