# Import Flask routing utilities for profile APIs.
from flask import Blueprint, jsonify, request
from sqlalchemy.orm.attributes import flag_modified

# Import auth guard, DB session and profile helpers.
from skillfolio.auth import current_user, login_required
from skillfolio.extensions import db
from skillfolio.gamification import ensure_stats
from skillfolio.models import Profile, SectionSetting, User
from skillfolio.profiles import (
    DEFAULT_SECTIONS,
    LIST_SECTIONS,
    build_portfolio,
    profile_completion,
    validate_contact_details,
    validate_other_details,
    validate_personal_details,
    validate_section_entry,
)
from skillfolio.users import createUserDefaults

# This Blueprint groups profile and portfolio endpoints.
profile_bp = Blueprint("profile", __name__, url_prefix="/api")


# Return the current user's profile, creating defaults on first access.
def _own_profile():
    user = current_user()
    if not user.profile:
        createUserDefaults(user)
        db.session.commit()
    return user, user.profile


# Return the requested profile section list or None when unknown.
def _section_entries(profile, section):
    if section not in LIST_SECTIONS:
        return None
    return list((profile.other_details or {}).get(section) or [])


# Persist a replaced list section on the profile document.
def _save_section(profile, section, entries):
    other = dict(profile.other_details or {})
    other[section] = entries
    profile.other_details = other
    flag_modified(profile, "other_details")
    db.session.commit()


# Return the profile document.
@profile_bp.get("/profile")
@login_required
def get_profile():
    _, profile = _own_profile()
    return jsonify({"success": True, "profile": profile.to_dict()}), 200


# Update profile documents and portfolio settings.
@profile_bp.put("/profile")
@login_required
def update_profile():
    _, profile = _own_profile()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "error": "Profile payload must be an object"}), 400

    # Validate each supplied document before changing anything.
    validators = (
        ("personalDetails", validate_personal_details),
        ("contactDetails", validate_contact_details),
        ("otherDetails", validate_other_details),
    )
    for key, validator in validators:
        if key in data:
            error = validator(data[key])
            if error:
                return jsonify({"success": False, "error": error}), 400

    theme = data.get("portfolioTheme")
    if theme is not None and (not isinstance(theme, str) or not theme.strip() or len(theme) > 50):
        return jsonify({"success": False, "error": "Portfolio theme must be a short name"}), 400
    if "isPublic" in data and not isinstance(data["isPublic"], bool):
        return jsonify({"success": False, "error": "isPublic must be true or false"}), 400

    # Persist validated fields.
    if "personalDetails" in data:
        profile.personal_details = data["personalDetails"]
    if "contactDetails" in data:
        profile.contact_details = data["contactDetails"]
    if "otherDetails" in data:
        profile.other_details = data["otherDetails"]
    if theme is not None:
        profile.portfolio_theme = theme.strip()
    if "isPublic" in data:
        profile.is_public = data["isPublic"]
    db.session.commit()

    return jsonify({"success": True, "profile": profile.to_dict()}), 200


# Report profile completeness for the completion banner.
@profile_bp.get("/profile/completion")
@login_required
def get_profile_completion():
    _, profile = _own_profile()
    return jsonify({"success": True, **profile_completion(profile)}), 200


# List entries of a profile section.
@profile_bp.get("/profile/sections/<section>")
@login_required
def list_section_entries(section):
    _, profile = _own_profile()
    entries = _section_entries(profile, section)
    if entries is None:
        return jsonify({"success": False, "error": "Section not found"}), 404
    return jsonify({"success": True, "section": section, "entries": entries}), 200


# Append an entry to a profile section.
@profile_bp.post("/profile/sections/<section>")
@login_required
def add_section_entry(section):
    _, profile = _own_profile()
    entries = _section_entries(profile, section)
    if entries is None:
        return jsonify({"success": False, "error": "Section not found"}), 404

    entry = request.get_json(silent=True)
    error = validate_section_entry(section, entry)
    if error:
        return jsonify({"success": False, "error": error}), 400

    entries.append(entry)
    _save_section(profile, section, entries)
    return jsonify({"success": True, "index": len(entries) - 1, "entries": entries}), 201


# Replace an entry of a profile section.
@profile_bp.put("/profile/sections/<section>/<int:index>")
@login_required
def update_section_entry(section, index):
    _, profile = _own_profile()
    entries = _section_entries(profile, section)
    if entries is None:
        return jsonify({"success": False, "error": "Section not found"}), 404
    if index >= len(entries):
        return jsonify({"success": False, "error": "Entry not found"}), 404

    entry = request.get_json(silent=True)
    error = validate_section_entry(section, entry)
    if error:
        return jsonify({"success": False, "error": error}), 400

    entries[index] = entry
    _save_section(profile, section, entries)
    return jsonify({"success": True, "entries": entries}), 200


# Remove an entry from a profile section.
@profile_bp.delete("/profile/sections/<section>/<int:index>")
@login_required
def delete_section_entry(section, index):
    _, profile = _own_profile()
    entries = _section_entries(profile, section)
    if entries is None:
        return jsonify({"success": False, "error": "Section not found"}), 404
    if index >= len(entries):
        return jsonify({"success": False, "error": "Entry not found"}), 404

    entries.pop(index)
    _save_section(profile, section, entries)
    return jsonify({"success": True, "entries": entries}), 200


# List section display settings in sort order.
@profile_bp.get("/section-settings")
@login_required
def get_section_settings():
    user = current_user()
    settings = (
        SectionSetting.query.filter_by(user_id=user.id)
        .order_by(SectionSetting.sort_order, SectionSetting.section_name)
        .all()
    )
    return jsonify({"success": True, "settings": [s.to_dict() for s in settings]}), 200


# Upsert section display settings.
@profile_bp.put("/section-settings")
@login_required
def update_section_settings():
    user = current_user()
    data = request.get_json(silent=True)
    items = data.get("settings") if isinstance(data, dict) else data
    if not isinstance(items, list) or not items:
        return jsonify({"success": False, "error": "Settings must be a non-empty list"}), 400

    # Validate every item before writing.
    for item in items:
        if not isinstance(item, dict) or item.get("sectionName") not in DEFAULT_SECTIONS:
            return jsonify({"success": False, "error": "Unknown section in settings"}), 400
        if "isVisible" in item and not isinstance(item["isVisible"], bool):
            return jsonify({"success": False, "error": "isVisible must be true or false"}), 400
        sort_order = item.get("sortOrder", 0)
        if isinstance(sort_order, bool) or not isinstance(sort_order, int) or sort_order < 0:
            return jsonify({"success": False, "error": "sortOrder must be a non-negative number"}), 400

    existing = {s.section_name: s for s in SectionSetting.query.filter_by(user_id=user.id).all()}
    for item in items:
        setting = existing.get(item["sectionName"])
        if not setting:
            setting = SectionSetting(user_id=user.id, section_name=item["sectionName"])
            db.session.add(setting)
            existing[item["sectionName"]] = setting
        if "isVisible" in item:
            setting.is_visible = item["isVisible"]
        if "sortOrder" in item:
            setting.sort_order = item["sortOrder"]
    db.session.commit()

    settings = sorted(existing.values(), key=lambda s: (s.sort_order, s.section_name))
    return jsonify({"success": True, "settings": [s.to_dict() for s in settings]}), 200


# Public portfolio view; counts visits from anyone but the owner.
@profile_bp.get("/portfolio/<int:user_id>")
def get_public_portfolio(user_id):
    user = db.session.get(User, user_id)
    profile = Profile.query.filter_by(user_id=user_id).first()
    if not user or not user.is_active or not profile or not profile.is_public:
        return jsonify({"success": False, "error": "Portfolio not found"}), 404

    viewer = current_user()
    if not viewer or viewer.id != user.id:
        stats = ensure_stats(user)
        stats.portfolio_views = (stats.portfolio_views or 0) + 1
        db.session.commit()

    settings = SectionSetting.query.filter_by(user_id=user.id).all()
    return jsonify({"success": True, "portfolio": build_portfolio(user, profile, settings)}), 200
