"""
Repository for PersonTag database operations
"""

from sqlalchemy import func
from db import db
from models.persontag import PersonTag


class PersonTagRepository:
    """Repository for PersonTag database operations"""

    @staticmethod
    def usage_counts():
        """Map tag id -> number of people referencing it"""
        rows = db.session.query(PersonTag.tag_id, func.count(PersonTag.person_id)).group_by(PersonTag.tag_id).all()
        return {tag_id: count for tag_id, count in rows}
