import sys
import os
import argparse
import logging

# Add parent directory to path so we can import app modules
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
sys.path.append(parent_dir)

import app
from auth import create_or_update_user
from repositories.user_repository import UserRepository

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def reset_password(username, password):
    """Reset password for a given user."""
    logger.info(f"Attempting to reset password for user: {username}")

    with app.create_app().app_context():
        try:
            user_obj = UserRepository.get_by_username(username)
            if not user_obj:
                logger.warning(f"User '{username}' not found. Creating new user.")

            # A recovery account is created as admin, an existing one keeps its rights
            admin = user_obj.admin_access if user_obj else True

            create_or_update_user(username=username, password=password, admin_access=admin)

            logger.info("Password updated successfully.")
            return True

        except Exception as e:
            logger.error(f"Failed to reset password: {e}")
            return False


def main():
    parser = argparse.ArgumentParser(description="Reset user password")
    parser.add_argument("username", help="Username to reset")
    parser.add_argument("password", help="New password")

    args = parser.parse_args()

    if reset_password(args.username, args.password):
        print("SUCCESS")
        sys.exit(0)
    else:
        print("FAILURE")
        sys.exit(1)


if __name__ == "__main__":
    main()
