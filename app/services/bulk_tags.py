"""
Bulk tag editor: add or remove a set of tags on every selected person.
"""
from dataclasses import dataclass, field
from typing import List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from constants import BULK_MODE_ADD, BULK_MODE_REMOVE
from db import db, transaction
from exceptions import PersistenceException, ValidationException
from metrics import track_db_query
from repositories.person_repository import PersonRepository
from repositories.tag_repository import TagRepository
from services.person_store import normalize_tag_names
from services.selection import SelectionManager, TagWorkingSet
from services.tag_store import TagStore

logger = structlog.get_logger('bulk_tags')


@dataclass
class BulkTagResult:
    mode: str
    tags: List[str] = field(default_factory=list)
    applied_ids: List[int] = field(default_factory=list)
    unchanged_ids: List[int] = field(default_factory=list)

    def to_dict(self):
        return {
            "mode": self.mode,
            "tags": self.tags,
            "applied_ids": self.applied_ids,
            "unchanged_ids": self.unchanged_ids,
        }


class BulkTagEditor:
    def __init__(self, tag_store: TagStore, database=db):
        self.tag_store = tag_store
        self.db = database

    def _resolve_tags(self, tag_names, mode):
        if mode == BULK_MODE_ADD:
            # Unknown tags are created up front, outside the per-person work
            with transaction("Creating tags for bulk add"):
                tags = self.tag_store.ensure_all(tag_names, commit=False)
            return tags
        # Removing never creates anything, unknown names are ignored
        return TagRepository.find_by_names(tag_names)

    @track_db_query("bulk_tags")
    def apply_to_selection(
        self,
        selection: SelectionManager,
        tag_names,
        mode: str,
        working_set: Optional[TagWorkingSet] = None,
    ) -> BulkTagResult:
        """
        Union (add) or difference (remove) of each selected person's tags with
        tag_names. Every person is written in its own savepoint; when some of
        them fail the others stay applied, the session is expired and a
        PersistenceException lists failed and applied ids. The selection and
        working set are cleared only when everybody succeeded.
        """
        if mode not in (BULK_MODE_ADD, BULK_MODE_REMOVE):
            raise ValidationException(f"Unknown bulk mode: {mode}", field="mode")
        if tag_names is None and working_set is not None:
            tag_names = working_set.names
        tag_names = normalize_tag_names(tag_names)
        if not tag_names:
            raise ValidationException("No tags chosen", field="tags")
        if not selection:
            raise ValidationException("No people selected", field="selection")

        tags = self._resolve_tags(tag_names, mode)
        result = BulkTagResult(mode=mode, tags=sorted(t.name for t in tags))
        failed = []

        for person_id in selection.ids:
            try:
                with self.db.session.begin_nested():
                    person = PersonRepository.get_by_id(person_id)
                    if person is None:
                        failed.append(person_id)
                        continue
                    current = list(person.tags)
                    if mode == BULK_MODE_ADD:
                        updated = current + [t for t in tags if t not in current]
                    else:
                        updated = [t for t in current if t not in tags]
                    if len(updated) == len(current):
                        result.unchanged_ids.append(person_id)
                        continue
                    person.tags = updated
                result.applied_ids.append(person_id)
            except SQLAlchemyError as e:
                logger.warning(f"Bulk {mode} failed for person {person_id}: {e}")
                failed.append(person_id)

        try:
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise PersistenceException(
                f"Bulk {mode} of tags could not be saved: {e}",
                failed_ids=selection.ids,
            ) from e

        if failed:
            # Whatever is cached may not match the database any more
            self.db.session.expire_all()
            raise PersistenceException(
                f"Bulk {mode} of tags failed for {len(failed)} of {len(selection)} people",
                failed_ids=failed,
                applied_ids=result.applied_ids + result.unchanged_ids,
            )

        selection.clear()
        if working_set is not None:
            working_set.clear()
        logger.info(
            f"Bulk {mode} of tags applied",
            tags=result.tags,
            applied=len(result.applied_ids),
            unchanged=len(result.unchanged_ids),
        )
        return result
