"""
Model: Person
"""

from db import db
from constants import NAME_MAX_LENGTH
from utils import now_utc, isoformat_or_none


class Person(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    firstname = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    lastname = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    solicitation_count = db.Column(db.Integer, nullable=False, default=0)
    last_solicitation_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=now_utc, index=True)

    tags = db.relationship(
        "Tag",
        secondary="person_tag",
        order_by="Tag.name",
        backref=db.backref("people", lazy="dynamic"),
    )

    __table_args__ = (db.Index("idx_person_name", "lastname", "firstname"),)

    @property
    def tag_names(self):
        return sorted(tag.name for tag in self.tags)

    @property
    def full_name(self):
        return f"{self.firstname} {self.lastname}"

    def to_dict(self):
        return {
            "id": self.id,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "tags": self.tag_names,
            "solicitation_count": self.solicitation_count or 0,
            "last_solicitation_date": isoformat_or_none(self.last_solicitation_date),
            "created_at": isoformat_or_none(self.created_at),
        }

    def __repr__(self):
        return f"<Person {self.id} {self.full_name!r}>"
