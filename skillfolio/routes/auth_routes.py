# Import logging for auth audit lines.
import logging

# Import Flask routing and session management utilities.
from flask import Blueprint, current_app, jsonify, request, session
from flask_wtf.csrf import generate_csrf

# Import auth guards, forms and user helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.forms import AccountUpdateForm, LoginForm, RegisterForm
from skillfolio.gamification import check_and_unlock_badges
from skillfolio.users import authenticateUser, createUser, getUserByEmail, recordLogin, updateUser

logger = logging.getLogger("skillfolio")

# This Blueprint groups JSON auth endpoints.
auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# Initialize session state for a logged-in user.
def _start_session(user):
    session.clear()
    session["user_id"] = user.id
    session["is_admin"] = bool(user.is_admin)


# Issue a CSRF token for API clients.
@auth_bp.get("/csrf-token")
def csrf_token():
    return jsonify({"success": True, "csrfToken": generate_csrf()}), 200


# Register a new account and start a session.
@auth_bp.post("/register")
def register():
    # Validate input payload using a form schema.
    form = RegisterForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    # Reject duplicate emails before creating the account.
    if getUserByEmail(form.email.data):
        return jsonify({"success": False, "error": "Email already registered"}), 409

    is_admin = form.email.data.strip().lower() in current_app.config["ADMIN_EMAILS"]
    user = createUser(
        form.email.data,
        form.password.data,
        first_name=form.firstName.data,
        last_name=form.lastName.data,
        is_admin=is_admin,
    )
    if not user:
        return jsonify({"success": False, "error": "Email already registered"}), 409

    _start_session(user)
    logger.info("User registered: user=%s admin=%s", user.id, user.is_admin)
    return jsonify({"success": True, "user": user.to_dict()}), 201


# Validate credentials and start a session.
@auth_bp.post("/login")
def login():
    form = LoginForm(data=request.get_json(silent=True) or {})
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    # Validate credentials before issuing a session.
    user = authenticateUser(form.email.data, form.password.data)
    if not user:
        logger.info("Failed login for %s", (form.email.data or "").strip().lower())
        return jsonify({"success": False, "error": "Invalid email or password"}), 401
    if not user.is_active:
        return jsonify({"success": False, "error": "Account is deactivated"}), 403

    recordLogin(user)
    # Login-based badges are evaluated on every successful login.
    unlocked = check_and_unlock_badges(user)
    db.session.commit()

    _start_session(user)
    logger.info("User logged in: user=%s", user.id)
    return jsonify({"success": True, "user": user.to_dict(), "unlockedBadges": unlocked}), 200


# Clear the session.
@auth_bp.post("/logout")
def logout():
    user_id = session.get("user_id")
    session.clear()
    if user_id:
        logger.info("User logged out: user=%s", user_id)
    return jsonify({"success": True}), 200


# Return the logged-in user.
@auth_bp.get("/user")
@login_required
def get_current_user():
    user = current_user()
    return jsonify({"success": True, "user": user.to_dict()}), 200


# Update the logged-in user's account fields.
@auth_bp.put("/user")
@login_required
def update_current_user():
    data = request.get_json(silent=True) or {}
    form = AccountUpdateForm(data=data)
    if not form.validate():
        return jsonify({"success": False, "error": "Validation failed", "messages": form.errors}), 400

    # Only fields present in the payload are changed.
    allowed = ("firstName", "lastName", "profileImageUrl", "password")
    changes = {key: data[key] for key in allowed if key in data}
    user = updateUser(current_user(), **changes)
    return jsonify({"success": True, "user": user.to_dict()}), 200
