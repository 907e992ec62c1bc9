"""
Repository for Tag database operations
"""

from sqlalchemy import func
from db import db
from models.tag import Tag, tag_key


class TagRepository:
    """Repository for Tag database operations"""

    @staticmethod
    def get_all():
        """Get all Tag records"""
        return Tag.query.all()

    @staticmethod
    def find_by_name(name):
        """Get Tag by name, ignoring case"""
        return Tag.query.filter_by(name_key=tag_key(name)).first()

    @staticmethod
    def find_by_names(names):
        """Get Tags matching any of the names, ignoring case"""
        keys = {tag_key(n) for n in names}
        if not keys:
            return []
        return Tag.query.filter(Tag.name_key.in_(keys)).all()

    @staticmethod
    def add(**kwargs):
        """Add a new Tag to the session and flush it (no commit)"""
        item = Tag(**kwargs)
        db.session.add(item)
        db.session.flush()
        return item

    @staticmethod
    def delete(item):
        """Mark a Tag for deletion (no commit)"""
        db.session.delete(item)
        db.session.flush()

    @staticmethod
    def count():
        """Count total Tag records"""
        return Tag.query.count()

    @staticmethod
    def count_by_category():
        """Count Tag records per category"""
        rows = db.session.query(Tag.category, func.count(Tag.id)).group_by(Tag.category).all()
        return {category: count for category, count in rows}
