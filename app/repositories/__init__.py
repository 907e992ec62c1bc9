"""
Repositories package

Each repository encapsulates database operations for a model:
- person_repository.py
- tag_repository.py
- persontag_repository.py
- user_repository.py

Usage:
    from repositories.person_repository import PersonRepository
    people = PersonRepository.get_all()
"""
