# Import password hashing utilities for secure credential handling.
from werkzeug.security import check_password_hash, generate_password_hash

from skillfolio.dates import utc_now
from skillfolio.extensions import db
from skillfolio.models import Profile, SectionSetting, User, UserStats
from skillfolio.profiles import DEFAULT_SECTIONS


# Create a new user and initialize core account rows.
def createUser(email, password, first_name=None, last_name=None, is_admin=False, is_active=True):
    email = (email or "").strip().lower()

    # Check for existing email collisions.
    if getUserByEmail(email):
        return None

    # Hash the password before persisting credentials.
    user = User(
        email=email,
        password_hash=generate_password_hash(password),
        first_name=(first_name or "").strip() or None,
        last_name=(last_name or "").strip() or None,
        is_admin=bool(is_admin),
        is_active=bool(is_active),
    )
    db.session.add(user)
    db.session.flush()

    createUserDefaults(user)
    db.session.commit()
    return user


# Populate the profile, stats and section settings every account needs.
def createUserDefaults(user):
    full_name = " ".join(part for part in (user.first_name, user.last_name) if part)
    if not user.profile:
        user.profile = Profile(
            personal_details={"fullName": full_name} if full_name else {},
            contact_details={"email": user.email},
            other_details={},
        )
    if not user.stats:
        user.stats = UserStats()
    # Seed section settings in the default display order.
    existing = {setting.section_name for setting in user.section_settings}
    for order, section in enumerate(DEFAULT_SECTIONS):
        if section not in existing:
            user.section_settings.append(
                SectionSetting(section_name=section, is_visible=True, sort_order=order)
            )


# Retrieve a user by primary key id.
def getUserById(user_id):
    return db.session.get(User, user_id)


# Retrieve a user by email address.
def getUserByEmail(email):
    return User.query.filter_by(email=(email or "").strip().lower()).first()


# Fetch all users ordered by creation date for admin views.
def getAllUsers():
    return User.query.order_by(User.created_at.desc(), User.id.desc()).all()


# Update user fields based on provided keyword arguments.
def updateUser(user, **kwargs):
    # Map API field names to model columns.
    field_map = {
        "email": "email",
        "firstName": "first_name",
        "lastName": "last_name",
        "profileImageUrl": "profile_image_url",
        "isActive": "is_active",
        "isAdmin": "is_admin",
    }
    for key, value in kwargs.items():
        if key == "password":
            if value:
                user.password_hash = generate_password_hash(value)
            continue
        column = field_map.get(key)
        if not column:
            continue
        if key == "email":
            value = (value or "").strip().lower()
        user_value = value.strip() if isinstance(value, str) else value
        setattr(user, column, user_value)

    db.session.commit()
    return user


# Delete a user and everything they own.
def deleteUser(user):
    db.session.delete(user)
    db.session.commit()
    return True


# Authenticate a user by email and password.
def authenticateUser(email, password):
    user = getUserByEmail(email)

    # Validate password hash before returning the user.
    if user and check_password_hash(user.password_hash, password or ""):
        return user
    return None


# Record a successful login on the account and its stats.
def recordLogin(user):
    user.last_login_at = utc_now()
    if not user.stats:
        createUserDefaults(user)
    user.stats.login_count = (user.stats.login_count or 0) + 1
    db.session.commit()
