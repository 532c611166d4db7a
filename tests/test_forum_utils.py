from skillfolio import forum


def test_normalize_forum_category_defaults_to_general():
    assert forum._normalize_forum_category("Nope") == "General"
    assert forum._normalize_forum_category("Career") == "Career"
    assert forum._normalize_forum_category(None) == "General"


def test_validate_forum_text_enforces_limits():
    title = "x" * (forum.FORUM_TITLE_MAX + 1)
    content = "ok"
    assert "Title must be" in (forum._validate_forum_text(title, content) or "")

    title = "ok"
    content = "x" * (forum.FORUM_CONTENT_MAX + 1)
    assert "Content must be" in (forum._validate_forum_text(title, content) or "")

    assert forum._validate_forum_text("", "content") == "Title and content are required."


def test_rate_limit_blocks_after_limit():
    key = "test-limit"
    forum._RATE_LIMIT_BUCKETS.pop(key, None)

    ok, _ = forum._rate_limit_check(key, limit=2, window_seconds=60)
    assert ok
    ok, _ = forum._rate_limit_check(key, limit=2, window_seconds=60)
    assert ok
    ok, retry_after = forum._rate_limit_check(key, limit=2, window_seconds=60)
    assert not ok
    assert retry_after >= 1


def test_forum_content_guard_flags_spam_and_offensive():
    assert forum._forum_content_guard("you are stupid") is not None
    assert forum._forum_content_guard("hellooooooo!!!!!!!!!!!!") is not None
    links = " ".join(f"https://example.com/{n}" for n in range(4))
    assert forum._forum_content_guard(links) == "Too many links in one post."
    assert forum._forum_content_guard("Friendly question about careers") is None


def test_forum_rate_key_depends_only_on_action_and_user():
    assert forum._forum_rate_key("post", 7) == "forum_post:user:7"
    assert forum._forum_rate_key("post", "7") == forum._forum_rate_key("post", 7)
    assert forum._forum_rate_key("like", 7) != forum._forum_rate_key("post", 7)
