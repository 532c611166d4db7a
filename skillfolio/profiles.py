"""Profile documents, portfolio sections and completion scoring.

A profile is stored as three JSON documents (personal, contact and other
details). ``other_details`` holds the list sections that users edit one entry
at a time, plus a ``skills`` mapping. The helpers here validate those
documents and assemble the public portfolio view.
"""
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email

LIST_SECTIONS = {
    "education": {"required": ["level", "institution"], "numbers": ["yearOfPassing"]},
    "workExperience": {"required": ["organization", "roleOrPosition", "startDate"]},
    "internships": {"required": ["organization", "roleOrPosition", "startDate", "endDate"]},
    "projects": {"required": ["title", "description", "domain"], "urls": ["url", "githubUrl"]},
    "certifications": {"required": ["title", "organization", "year"], "numbers": ["year"], "urls": ["url"]},
    "organizations": {"required": ["name", "role", "year", "contribution"]},
    "achievements": {"text": True},
    "publicationsOrCreativeWorks": {
        "required": ["title", "type", "journalOrPlatform", "year"],
        "numbers": ["year"],
        "urls": ["url"],
        "choices": {"type": ["Research Paper", "Portfolio Work", "Article", "Book", "Other"]},
    },
    "volunteerExperience": {"required": ["organization", "role", "description", "year"]},
    "interestsOrHobbies": {"text": True},
}

SKILL_GROUPS = ["technical", "domainSpecific", "soft", "tools"]
GENDERS = ["Male", "Female", "Other"]
CONTACT_URL_FIELDS = ["linkedin", "githubOrPortfolio", "website", "twitter"]
OTHER_PROFILE_FIELDS = ["behance", "dribbble", "researchgate", "orcid"]

DEFAULT_SECTIONS = [
    "personalDetails",
    "contactDetails",
    "education",
    "workExperience",
    "internships",
    "projects",
    "skills",
    "certifications",
    "organizations",
    "achievements",
    "publicationsOrCreativeWorks",
    "volunteerExperience",
    "interestsOrHobbies",
]


def _is_url(value):
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def _is_email(value):
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _is_text_list(value):
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_personal_details(data):
    if not isinstance(data, dict):
        return "personalDetails must be an object"
    full_name = data.get("fullName")
    if not isinstance(full_name, str) or len(full_name.strip()) < 2:
        return "Full name is required"
    if data.get("gender") is not None and data["gender"] not in GENDERS:
        return "Gender must be Male, Female, or Other"
    if data.get("location") is not None and not isinstance(data["location"], dict):
        return "Location must be an object"
    if data.get("languagesKnown") is not None and not _is_text_list(data["languagesKnown"]):
        return "languagesKnown must be a list of strings"
    return None


def validate_contact_details(data):
    if not isinstance(data, dict):
        return "contactDetails must be an object"
    if data.get("email") and not _is_email(data["email"]):
        return "Contact email is invalid"
    for field in CONTACT_URL_FIELDS:
        if data.get(field) and not _is_url(data[field]):
            return f"{field} must be a valid URL"
    others = data.get("otherProfiles")
    if others is not None:
        if not isinstance(others, dict):
            return "otherProfiles must be an object"
        for field in OTHER_PROFILE_FIELDS:
            if others.get(field) and not _is_url(others[field]):
                return f"{field} must be a valid URL"
    return None


def validate_skills(data):
    if not isinstance(data, dict):
        return "skills must be an object"
    for group, values in data.items():
        if group not in SKILL_GROUPS:
            return f"Unknown skill group: {group}"
        if not _is_text_list(values):
            return f"skills.{group} must be a list of strings"
    return None


def validate_section_entry(section, entry):
    """Return an error message for an invalid entry of a list section, else None."""
    rules = LIST_SECTIONS[section]
    if rules.get("text"):
        if not isinstance(entry, str) or not entry.strip():
            return "Entry must be a non-empty string"
        return None
    if not isinstance(entry, dict):
        return "Entry must be an object"
    for key in rules.get("required", []):
        value = entry.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return f"{key} is required"
    for key in rules.get("numbers", []):
        if entry.get(key) is not None and (isinstance(entry[key], bool) or not isinstance(entry[key], int)):
            return f"{key} must be a number"
    for key in rules.get("urls", []):
        if entry.get(key) and not _is_url(entry[key]):
            return f"{key} must be a valid URL"
    for key, choices in rules.get("choices", {}).items():
        if entry.get(key) not in choices:
            return f"{key} must be one of: {', '.join(choices)}"
    return None


def validate_other_details(data):
    if not isinstance(data, dict):
        return "otherDetails must be an object"
    for key, value in data.items():
        if key == "skills":
            error = validate_skills(value)
        elif key in LIST_SECTIONS:
            if not isinstance(value, list):
                return f"{key} must be a list"
            error = next(
                (e for e in (validate_section_entry(key, entry) for entry in value) if e),
                None,
            )
            if error:
                error = f"{key}: {error}"
        else:
            error = f"Unknown section: {key}"
        if error:
            return error
    return None


def profile_completion(profile):
    """Score a profile the way the completion banner does.

    Five required fields and four optional groups count equally.
    """
    personal = (profile.personal_details if profile else None) or {}
    contact = (profile.contact_details if profile else None) or {}
    other = (profile.other_details if profile else None) or {}
    location = personal.get("location") or {}
    skills = other.get("skills") or {}

    required = [
        ("Full Name", personal.get("fullName")),
        ("Professional Role", personal.get("roleOrTitle")),
        ("Phone Number", contact.get("phone")),
        ("Location", any(location.get(k) for k in ("city", "state", "country")) if isinstance(location, dict) else location),
        ("Professional Summary", personal.get("summary")),
    ]
    optional = [
        ("Skills", any(skills.get(group) for group in SKILL_GROUPS) if isinstance(skills, dict) else False),
        ("Projects", bool(other.get("projects"))),
        ("Work Experience", bool(other.get("workExperience"))),
        ("Education", bool(other.get("education"))),
    ]
    fields = required + optional
    filled = sum(1 for _, value in fields if value)
    return {
        "percentage": round(filled / len(fields) * 100),
        "missingFields": [label for label, value in fields if not value],
        "missingRequired": [label for label, value in required if not value],
    }


def section_data(profile, section):
    if section == "personalDetails":
        return profile.personal_details or {}
    if section == "contactDetails":
        return profile.contact_details or {}
    return (profile.other_details or {}).get(section, {} if section == "skills" else [])


def build_portfolio(user, profile, settings):
    """Assemble the public portfolio: visible sections only, in display order."""
    visible = sorted(
        (setting for setting in settings if setting.is_visible),
        key=lambda setting: (setting.sort_order, setting.section_name),
    )
    return {
        "user": {
            "id": user.id,
            "fullName": (profile.personal_details or {}).get("fullName") or user.full_name,
            "profileImageUrl": user.profile_image_url,
        },
        "theme": profile.portfolio_theme,
        "sections": [
            {"name": setting.section_name, "data": section_data(profile, setting.section_name)}
            for setting in visible
        ],
    }
