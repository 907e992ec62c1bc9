"""
Repository for User database operations
"""

from db import db
from models.user import User


class UserRepository:
    """Repository for User database operations"""

    @staticmethod
    def get_all():
        """Get all User records"""
        return User.query.order_by(User.user).all()

    @staticmethod
    def get_by_id(id):
        """Get User by ID"""
        return db.session.get(User, id)

    @staticmethod
    def get_by_username(username):
        """Get User by login name"""
        return User.query.filter_by(user=username).first()

    @staticmethod
    def count_admins():
        """Count accounts with admin access"""
        return User.query.filter_by(admin_access=True).count()

    @staticmethod
    def delete(id):
        """Delete User record"""
        item = db.session.get(User, id)
        if not item:
            return False

        db.session.delete(item)
        db.session.commit()
        return True

    @staticmethod
    def count():
        """Count total User records"""
        return User.query.count()
