"""
The contact book owned by the application: one instance per Flask app,
reachable from routes as current_app.contacts.
"""
from db import db
from services.bulk_tags import BulkTagEditor
from services.import_reconciler import ImportReconciler
from services.person_store import PersonStore
from services.tag_store import TagStore


class ContactBook:
    def __init__(self, database=db):
        self.tags = TagStore(database)
        self.reconciler = ImportReconciler()
        self.people = PersonStore(self.tags, self.reconciler, database)
        self.bulk_tags = BulkTagEditor(self.tags, database)

    def init_app(self, app):
        app.contacts = self
        return self
