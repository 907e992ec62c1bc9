"""
Model: User
"""

from db import db
from flask_login import UserMixin

ACCESS_CONTACTS = "contacts"
ACCESS_ADMIN = "admin"


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user = db.Column(db.String(100), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)
    admin_access = db.Column(db.Boolean, default=False)

    @property
    def is_admin(self):
        return bool(self.admin_access)

    def has_admin_access(self):
        return bool(self.admin_access)

    def has_access(self, access):
        if access == ACCESS_ADMIN:
            return self.has_admin_access()
        # Every account can work with the contact book
        return access == ACCESS_CONTACTS

    def to_dict(self):
        return {"id": self.id, "user": self.user, "admin_access": self.is_admin}
