import re
import time

FORUM_CATEGORIES = {"General", "Career", "Learning", "Projects", "Interviews"}
FORUM_TITLE_MAX = 140
FORUM_CONTENT_MAX = 3000
FORUM_BAD_WORDS = {"idiot", "stupid", "dumb", "hate you"}
FORUM_MAX_LINKS = 3
REPORT_STATUSES = {"pending", "confirmed", "resolved"}
_RATE_LIMIT_BUCKETS = {}


def _rate_limit_check(key: str, limit: int, window_seconds: int) -> tuple[bool, int]:
    now = time.time()
    window_start = now - window_seconds
    events = _RATE_LIMIT_BUCKETS.get(key, [])
    events = [stamp for stamp in events if stamp >= window_start]
    if len(events) >= limit:
        retry_after = int(max(1, window_seconds - (now - events[0])))
        _RATE_LIMIT_BUCKETS[key] = events
        return False, retry_after
    events.append(now)
    _RATE_LIMIT_BUCKETS[key] = events
    return True, 0


def _forum_rate_key(action: str, user_id: int) -> str:
    return f"forum_{action}:user:{int(user_id)}"


def _normalize_forum_category(value: str) -> str:
    category = (value or "").strip()
    if category in FORUM_CATEGORIES:
        return category
    return "General"


def _validate_forum_text(title: str, content: str) -> str | None:
    if not title or not content:
        return "Title and content are required."
    if len(title) > FORUM_TITLE_MAX:
        return f"Title must be {FORUM_TITLE_MAX} characters or fewer."
    if len(content) > FORUM_CONTENT_MAX:
        return f"Content must be {FORUM_CONTENT_MAX} characters or fewer."
    return None


def _forum_content_guard(text: str) -> str | None:
    lowered = (text or "").casefold()
    for word in FORUM_BAD_WORDS:
        if word in lowered:
            return "Please keep posts respectful. Avoid offensive language."
    if lowered.count("http://") + lowered.count("https://") > FORUM_MAX_LINKS:
        return "Too many links in one post."
    if re.search(r"(.)\1{10,}", lowered):
        return "Please avoid spam-like repeated characters."
    return None
