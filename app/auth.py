from flask import Blueprint, request
from flask_login import LoginManager, login_user, logout_user, current_user
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.security import generate_password_hash, check_password_hash
from functools import wraps
from db import db
from models.user import User, ACCESS_ADMIN
from settings import load_settings
from api_responses import success_response, error_response, handle_api_errors, get_json_body, ErrorCode
from repositories.user_repository import UserRepository
from exceptions import AuthenticationException, AuthorizationException
import os
import logging

# Retrieve main logger
logger = logging.getLogger("main")

auth_blueprint = Blueprint("auth", __name__, url_prefix="/api")

login_manager = LoginManager()

limiter = Limiter(key_func=get_remote_address)


@login_manager.user_loader
def load_user(user_id):
    """Load user for Flask-Login"""
    return UserRepository.get_by_id(int(user_id))


@login_manager.unauthorized_handler
def unauthorized_json():
    raise AuthenticationException("Authentication required")


def account_created():
    """Check if at least one account exists"""
    return UserRepository.count() > 0


def admin_account_created():
    """Check if at least one admin account exists"""
    return UserRepository.count_admins() > 0


def has_valid_session():
    """The only thing the contact book needs to know about auth"""
    if not account_created():
        return True
    return bool(current_user.is_authenticated)


def access_required(access: str):
    def _access_required(f):
        @wraps(f)
        def decorated_view(*args, **kwargs):
            if not account_created():
                # Auth disabled until the first account exists
                return f(*args, **kwargs)

            # 1. Try Session Authentication (Browser)
            if current_user.is_authenticated:
                if not current_user.has_access(access):
                    raise AuthorizationException(f"{access} access required")
                return f(*args, **kwargs)

            # 2. Try Basic Authentication (API/Automation)
            if request.authorization:
                success, error, user = basic_auth(request)
                if success:
                    if not user.has_access(access):
                        raise AuthorizationException(f"{access} access required")
                    return f(*args, **kwargs)
                logger.warning(error)

            # 3. Failed
            return login_manager.unauthorized()

        return decorated_view

    return _access_required


def basic_auth(request):
    auth = request.authorization
    if auth is None or auth.type != "basic":
        return False, "Authentication required.", None

    username = auth.username
    user = UserRepository.get_by_username(username)
    if user is None:
        return False, f'Unknown user "{username}".', None

    if not check_password_hash(user.password, auth.password or ""):
        return False, f'Incorrect password for user "{username}".', None

    return True, None, user


def create_or_update_user(username, password, admin_access=False):
    """
    Create a new user or update an existing user with the given credentials and access rights.
    """
    user = UserRepository.get_by_username(username)
    try:
        hashed_pw = generate_password_hash(password, method="pbkdf2:sha256")
        if user:
            logger.info(f"Updating existing user {username}")
            user.admin_access = admin_access
            user.password = hashed_pw
        else:
            logger.info(f"Creating new user {username}")
            user = User(user=username, password=hashed_pw, admin_access=admin_access)
            db.session.add(user)
        db.session.commit()
        return user
    except Exception as e:
        logger.error(f"Error saving user {username}: {e}")
        db.session.rollback()
        raise e


def init_user_from_environment(environment_name, admin=False):
    """
    allow to init some user from environment variable to init some users without using the UI
    """
    username = os.getenv(environment_name + "_NAME")
    password = os.getenv(environment_name + "_PASSWORD")
    if username and password:
        if admin:
            logger.info("Initializing an admin user from environment variable...")
        else:
            logger.info("Initializing a regular user from environment variable...")
            if not admin_account_created():
                logger.error(f"Error creating user {username}, first account created must be admin")
                return

        create_or_update_user(username, password, admin_access=admin)


def init_users(app):
    with app.app_context():
        # init users from ENV
        if os.environ.get("USER_ADMIN_NAME") is not None:
            init_user_from_environment(environment_name="USER_ADMIN", admin=True)
        if os.environ.get("USER_GUEST_NAME") is not None:
            init_user_from_environment(environment_name="USER_GUEST", admin=False)


def _login_rate_limit():
    return load_settings()["auth"]["login_rate_limit"]


@auth_blueprint.route("/login", methods=["POST"])
@limiter.limit(_login_rate_limit)
@handle_api_errors
def login():
    data = get_json_body() if request.is_json else request.form
    username = data.get("user")
    password = data.get("password")
    remember = bool(data.get("remember"))

    if not username or not password:
        return error_response(ErrorCode.VALIDATION_ERROR, message="user and password are required")

    user = UserRepository.get_by_username(username)

    # take the user-supplied password, hash it, and compare it to the hashed password in the database
    if not user or not check_password_hash(user.password, password):
        logger.warning(f"Incorrect login for user {username}")
        return error_response(ErrorCode.UNAUTHORIZED, message="Invalid credentials", status_code=401, log_error=False)

    logger.info(f"Successful login for user {username}")
    login_user(user, remember=remember)
    return success_response(data=user.to_dict(), message="Logged in")


@auth_blueprint.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return success_response(message="Logged out")


@auth_blueprint.route("/session")
def session_status():
    """Whether the caller may use the contact book"""
    user = current_user.to_dict() if current_user.is_authenticated else None
    return success_response(
        data={
            "authenticated": has_valid_session(),
            "auth_enabled": account_created(),
            "user": user,
        }
    )


@auth_blueprint.route("/users")
@access_required(ACCESS_ADMIN)
@handle_api_errors
def get_users_api():
    """List accounts"""
    return success_response(data=[u.to_dict() for u in UserRepository.get_all()])


@auth_blueprint.route("/user", methods=["POST"])
@access_required(ACCESS_ADMIN)
@handle_api_errors
def create_user_api():
    """Create or update an account"""
    data = get_json_body()
    username = (data.get("user") or "").strip()
    password = data.get("password")
    admin_access = bool(data.get("admin_access", False))

    if not username or not password:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Username and password are required")

    if not admin_access and not admin_account_created():
        return error_response(ErrorCode.VALIDATION_ERROR, message="First account created must be admin")

    user = create_or_update_user(username, password, admin_access=admin_access)
    return success_response(data={"user": user.to_dict()}, message="User saved")


@auth_blueprint.route("/user", methods=["DELETE"])
@access_required(ACCESS_ADMIN)
@handle_api_errors
def delete_user_api():
    """Remove an account"""
    data = get_json_body()
    user_id = data.get("user_id")

    if not user_id:
        return error_response(ErrorCode.VALIDATION_ERROR, message="user_id is required")

    if current_user.is_authenticated and int(user_id) == current_user.id:
        return error_response(ErrorCode.VALIDATION_ERROR, message="Cannot delete yourself")

    if UserRepository.delete(int(user_id)):
        return success_response(message="User deleted")
    return error_response(ErrorCode.NOT_FOUND, message="User not found", status_code=404)
