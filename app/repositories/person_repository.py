"""
Repository for Person database operations
"""

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from db import db
from models.person import Person


class PersonRepository:
    """Repository for Person database operations"""

    @staticmethod
    def get_all():
        """Get all Person records, newest first, tags preloaded"""
        return (
            Person.query.options(selectinload(Person.tags))
            .order_by(Person.created_at.desc(), Person.id.desc())
            .all()
        )

    @staticmethod
    def get_by_id(id):
        """Get Person by ID"""
        return db.session.get(Person, id)

    @staticmethod
    def get_by_ids(ids):
        """Get People by a list of IDs"""
        ids = list(ids)
        if not ids:
            return []
        return Person.query.options(selectinload(Person.tags)).filter(Person.id.in_(ids)).all()

    @staticmethod
    def add(**kwargs):
        """Add a new Person to the session and flush it (no commit)"""
        item = Person(**kwargs)
        db.session.add(item)
        db.session.flush()
        return item

    @staticmethod
    def delete(item):
        """Mark a Person for deletion (no commit)"""
        db.session.delete(item)

    @staticmethod
    def count():
        """Count total Person records"""
        return Person.query.count()

    @staticmethod
    def total_solicitations():
        """Sum of solicitation counts across all people"""
        return db.session.query(func.coalesce(func.sum(Person.solicitation_count), 0)).scalar()
