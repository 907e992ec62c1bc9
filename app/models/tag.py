"""
Model: Tag
"""

from sqlalchemy.orm import validates

from db import db
from constants import UNCATEGORIZED, TAG_NAME_MAX_LENGTH


def tag_key(name):
    """Lookup key of a tag name: trimmed and casefolded"""
    return name.strip().casefold()


class Tag(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(TAG_NAME_MAX_LENGTH), unique=True, nullable=False)
    # SQLite lower() only folds ASCII, so lookups go through this column
    name_key = db.Column(db.String(TAG_NAME_MAX_LENGTH), unique=True, nullable=False, index=True)
    is_priority = db.Column(db.Boolean, nullable=False, default=False)
    category = db.Column(db.String(50), nullable=False, default=UNCATEGORIZED, index=True)

    @validates("name")
    def _sync_name_key(self, key, value):
        self.name_key = tag_key(value)
        return value

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "is_priority": bool(self.is_priority),
            "category": self.category or UNCATEGORIZED,
        }

    def __repr__(self):
        return f"<Tag {self.name!r} ({self.category})>"
