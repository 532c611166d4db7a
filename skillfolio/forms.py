# Import Flask-WTF base form and field/validator utilities for input validation.
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import FloatField, IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, Length, NumberRange, Optional, URL, ValidationError

COURSE_LEVELS = ["Beginner", "Intermediate", "Advanced", "All"]
SUBTOPIC_STATUSES = ["pending", "start", "completed"]
REPORT_REASONS = ["spam", "abuse", "harassment", "misinformation", "other"]


# Base form fed from a JSON object instead of request.form.
class JsonForm(FlaskForm):
    def __init__(self, data=None, **kwargs):
        # Treat JSON nulls as missing values so numeric fields do not choke on None.
        payload = {key: value for key, value in (data or {}).items() if value is not None}
        # Accept the CSRF token from the header used by the API client.
        if "csrf_token" not in payload and request.headers.get("X-CSRF-Token"):
            payload["csrf_token"] = request.headers["X-CSRF-Token"]
        # Form data is text; nested objects and lists are left for the route to read from payload.
        formdata = {
            key: str(value)
            for key, value in payload.items()
            if not isinstance(value, (dict, list))
        }
        super().__init__(formdata=MultiDict(formdata), **kwargs)
        self.payload = payload

    # Reject JSON values whose type does not fit the declared field.
    def validate(self, extra_validators=None):
        valid = super().validate(extra_validators=extra_validators)
        for name, field in self._fields.items():
            value = self.payload.get(name)
            if value is None:
                continue
            if isinstance(field, StringField):
                mismatch = not isinstance(value, str)
            else:
                mismatch = isinstance(value, (bool, dict, list))
            if mismatch:
                field.errors = list(field.errors) + ["Invalid value type"]
                valid = False
        return valid


# Read a boolean flag from a JSON payload, falling back when it is absent.
def json_bool(data, key, default=False):
    value = (data or {}).get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


# Form schema for account registration.
class RegisterForm(JsonForm):
    email = StringField('Email', validators=[
        DataRequired(message="Email is required"),
        Email(message="Invalid email address"),
        Length(max=255, message="Email must be 255 characters or less")
    ])
    password = StringField('Password', validators=[
        DataRequired(message="Password is required"),
        Length(min=6, max=128, message="Password must be at least 6 characters")
    ])
    firstName = StringField('First Name', validators=[
        Optional(),
        Length(max=100, message="First name must be 100 characters or less")
    ])
    lastName = StringField('Last Name', validators=[
        Optional(),
        Length(max=100, message="Last name must be 100 characters or less")
    ])


# Form schema for credential login.
class LoginForm(JsonForm):
    email = StringField('Email', validators=[DataRequired(message="Email is required")])
    password = StringField('Password', validators=[DataRequired(message="Password is required")])


# Form schema for partial account updates by the account owner.
class AccountUpdateForm(JsonForm):
    firstName = StringField('First Name', validators=[
        Optional(),
        Length(max=100, message="First name must be 100 characters or less")
    ])
    lastName = StringField('Last Name', validators=[
        Optional(),
        Length(max=100, message="Last name must be 100 characters or less")
    ])
    profileImageUrl = StringField('Profile Image URL', validators=[
        Optional(),
        URL(message="Profile image must be a valid URL"),
        Length(max=500)
    ])
    password = StringField('Password', validators=[
        Optional(),
        Length(min=6, max=128, message="Password must be at least 6 characters")
    ])


# Form schema for admin user creation; isActive and isAdmin are read with json_bool.
class AdminUserForm(RegisterForm):
    pass


# Form schema for partial admin user updates.
class AdminUserUpdateForm(AccountUpdateForm):
    email = StringField('Email', validators=[
        Optional(),
        Email(message="Invalid email address"),
        Length(max=255, message="Email must be 255 characters or less")
    ])


# Form schema for course create/update operations.
class CourseForm(JsonForm):
    title = StringField('Course Title', validators=[
        DataRequired(message="Course title is required"),
        Length(min=3, max=200, message="Title must be between 3 and 200 characters")
    ])
    subtitle = StringField('Subtitle', validators=[Optional(), Length(max=300)])
    description = TextAreaField('Description', validators=[
        DataRequired(message="Description is required"),
        Length(min=10, message="Description must be at least 10 characters")
    ])
    language = StringField('Language', default="English", validators=[Optional(), Length(max=50)])
    level = StringField('Level', default="All", validators=[
        Optional(),
        AnyOf(COURSE_LEVELS, message="Level must be Beginner, Intermediate, Advanced, or All")
    ])
    coverImageUrl = StringField('Cover Image URL', validators=[Optional(), URL(message="Cover image must be a valid URL")])
    promoVideoUrl = StringField('Promo Video URL', validators=[Optional(), URL(message="Promo video must be a valid URL")])
    # Must run validate_price even when the price is missing.
    price = FloatField('Price', default=0, validators=[
        NumberRange(min=0, message="Price cannot be negative")
    ])
    durationMonths = IntegerField('Duration (months)', validators=[
        Optional(),
        NumberRange(min=1, max=120, message="Duration must be between 1 and 120 months")
    ])
    scheduleInfo = StringField('Schedule', validators=[Optional(), Length(max=300)])

    # Paid courses need a price.
    def validate_price(self, field):
        if not json_bool(self.payload, "isFree", True) and not field.data:
            raise ValidationError('Paid courses must have a price')


# Form schema for learning module create/update operations.
class ModuleForm(JsonForm):
    title = StringField('Module Title', validators=[
        DataRequired(message="Module title is required"),
        Length(min=3, max=200, message="Title must be between 3 and 200 characters")
    ])
    description = TextAreaField('Description', validators=[Optional(), Length(max=2000)])
    category = StringField('Category', validators=[Optional(), Length(max=100)])
    moduleOrder = IntegerField('Module Order', validators=[
        Optional(),
        NumberRange(min=1, message="Module order must be greater than 0")
    ])
    durationHours = IntegerField('Duration (hours)', validators=[
        Optional(),
        NumberRange(min=0, max=1000, message="Duration must be between 0 and 1000 hours")
    ])
    xpReward = IntegerField('XP Reward', default=100, validators=[
        Optional(),
        NumberRange(min=0, max=10000, message="XP reward must be between 0 and 10,000")
    ])


# Form schema for lesson create/update operations.
class LessonForm(JsonForm):
    title = StringField('Lesson Title', validators=[
        DataRequired(message="Lesson title is required"),
        Length(min=3, max=200, message="Title must be between 3 and 200 characters")
    ])
    description = TextAreaField('Description', validators=[Optional(), Length(max=2000)])
    content = TextAreaField('Content', validators=[Optional()])
    videoUrl = StringField('Video URL', validators=[Optional(), URL(message="Video must be a valid URL")])
    lessonOrder = IntegerField('Lesson Order', validators=[
        Optional(),
        NumberRange(min=1, message="Lesson order must be greater than 0")
    ])
    durationMinutes = IntegerField('Duration (minutes)', validators=[
        Optional(),
        NumberRange(min=0, max=1440, message="Duration must be between 0 and 1440 minutes")
    ])


# Form schema for quiz question creation; options are validated separately.
class QuizQuestionForm(JsonForm):
    question = TextAreaField('Question', validators=[
        DataRequired(message="Question is required"),
        Length(min=5, max=1000, message="Question must be between 5 and 1000 characters")
    ])
    correctAnswer = IntegerField('Correct Answer Index', validators=[
        NumberRange(min=0, max=5, message="Answer index must be between 0 and 5")
    ])
    explanation = TextAreaField('Explanation', validators=[Optional(), Length(max=2000)])

    # DataRequired rejects index 0, so presence is checked explicitly.
    def validate_correctAnswer(self, field):
        if field.data is None:
            raise ValidationError('Correct answer index is required')


# Form schema for goal metadata.
class GoalForm(JsonForm):
    name = StringField('Goal Name', validators=[
        DataRequired(message="Goal name is required"),
        Length(min=2, max=200, message="Name must be between 2 and 200 characters")
    ])
    description = TextAreaField('Description', validators=[Optional(), Length(max=2000)])


# Form schema for subtopic and topic status changes.
class StatusForm(JsonForm):
    status = StringField('Status', validators=[
        DataRequired(message="Status is required"),
        AnyOf(SUBTOPIC_STATUSES, message="Status must be pending, start, or completed")
    ])
    notes = TextAreaField('Notes', validators=[Optional(), Length(max=2000)])


# Form schema for forum posts.
class ForumPostForm(JsonForm):
    title = StringField('Title', validators=[
        DataRequired(message="Title is required"),
        Length(min=3, max=140, message="Title must be between 3 and 140 characters")
    ])
    content = TextAreaField('Content', validators=[
        DataRequired(message="Content is required"),
        Length(min=10, max=3000, message="Content must be between 10 and 3000 characters")
    ])
    category = StringField('Category', validators=[Optional(), Length(max=50)])


# Form schema for forum replies.
class ForumReplyForm(JsonForm):
    content = TextAreaField('Reply', validators=[
        DataRequired(message="Reply is required"),
        Length(min=3, max=3000, message="Reply must be between 3 and 3000 characters")
    ])


# Form schema for forum post reports.
class ForumReportForm(JsonForm):
    reason = StringField('Reason', validators=[
        DataRequired(message="Reason is required"),
        AnyOf(REPORT_REASONS, message="Reason must be spam, abuse, harassment, misinformation, or other")
    ])
    details = TextAreaField('Details', validators=[Optional(), Length(max=300)])
