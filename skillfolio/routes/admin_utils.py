# Import Flask utilities for JSON errors.
from flask import jsonify

# Import the session user lookup to validate admin status.
from skillfolio.auth import current_user


# Validate that the current session belongs to an admin user.
def require_admin():
    user = current_user()
    if not user:
        return None, (jsonify({"success": False, "error": "Authentication required"}), 401)
    # Check the stored flag so revoked admins lose access immediately.
    if not user.is_admin:
        return None, (jsonify({"success": False, "error": "Admin access required"}), 403)
    return user.id, None
