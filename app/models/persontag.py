"""
Model: PersonTag
Association between people and tags
"""

from db import db


class PersonTag(db.Model):
    __tablename__ = "person_tag"

    person_id = db.Column(db.Integer, db.ForeignKey("person.id", ondelete="CASCADE"), primary_key=True)
    tag_id = db.Column(db.Integer, db.ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True, index=True)
