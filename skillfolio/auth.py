# Import wrapper utility to preserve route metadata on decorators.
from functools import wraps

# Import session access for request authentication checks.
from flask import jsonify, session

# Import the user model to reject sessions of deleted or deactivated accounts.
from skillfolio.extensions import db
from skillfolio.models import User


# Return the logged-in user or None.
def current_user():
    user_id = session.get("user_id")
    if not user_id:
        return None
    user = db.session.get(User, user_id)
    if not user or not user.is_active:
        return None
    return user


# Enforce session-based authentication for protected routes.
def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        # Validate user session to prevent unauthorized access.
        if not current_user():
            return jsonify({"success": False, "error": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapped
