"""
Models package

One file per model:
- tag.py
- person.py
- persontag.py
- user.py

Usage:
    from models import Person, Tag
"""

from .tag import Tag
from .persontag import PersonTag
from .person import Person
from .user import User

__all__ = [
    "Tag",
    "PersonTag",
    "Person",
    "User",
]
