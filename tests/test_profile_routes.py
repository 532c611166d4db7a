EDUCATION = {"level": "Bachelors", "institution": "State University", "yearOfPassing": 2024}


def test_profile_defaults_are_created_at_registration(auth_client):
    resp = auth_client.get("/api/profile")
    assert resp.status_code == 200
    profile = resp.get_json()["profile"]
    assert profile["personalDetails"]["fullName"] == "Test User"
    assert profile["contactDetails"]["email"] == "learner@example.com"
    assert profile["isPublic"] is False
    assert profile["portfolioTheme"] == "modern"


def test_update_profile_validates_documents(auth_client):
    bad_name = auth_client.put("/api/profile", json={"personalDetails": {"fullName": ""}})
    assert bad_name.status_code == 400
    assert bad_name.get_json()["error"] == "Full name is required"

    bad_url = auth_client.put("/api/profile", json={"contactDetails": {"linkedin": "not a url"}})
    assert bad_url.status_code == 400

    bad_flag = auth_client.put("/api/profile", json={"isPublic": "yes"})
    assert bad_flag.status_code == 400

    unknown = auth_client.put("/api/profile", json={"otherDetails": {"hobbies": []}})
    assert unknown.get_json()["error"] == "Unknown section: hobbies"

    resp = auth_client.put("/api/profile", json={
        "personalDetails": {"fullName": "Ada Lovelace", "roleOrTitle": "Analyst"},
        "portfolioTheme": "minimal",
    })
    assert resp.status_code == 200
    profile = resp.get_json()["profile"]
    assert profile["personalDetails"]["roleOrTitle"] == "Analyst"
    assert profile["portfolioTheme"] == "minimal"


def test_profile_completion_counts_required_and_optional_fields(auth_client):
    completion = auth_client.get("/api/profile/completion").get_json()
    # Only the full name is filled out of nine fields.
    assert completion["percentage"] == 11
    assert "Phone Number" in completion["missingRequired"]
    assert "Education" in completion["missingFields"]

    auth_client.put("/api/profile", json={
        "personalDetails": {
            "fullName": "Test User",
            "roleOrTitle": "Engineer",
            "summary": "Builds things",
            "location": {"city": "Pune"},
        },
        "contactDetails": {"phone": "12345"},
    })
    completion = auth_client.get("/api/profile/completion").get_json()
    assert completion["missingRequired"] == []
    assert completion["percentage"] == 56


def test_section_entries_crud(auth_client):
    assert auth_client.get("/api/profile/sections/education").get_json()["entries"] == []
    assert auth_client.get("/api/profile/sections/unknown").status_code == 404

    resp = auth_client.post("/api/profile/sections/education", json=EDUCATION)
    assert resp.status_code == 201
    assert resp.get_json()["index"] == 0

    missing = auth_client.post("/api/profile/sections/education", json={"level": "Masters"})
    assert missing.status_code == 400
    assert missing.get_json()["error"] == "institution is required"

    year = auth_client.post("/api/profile/sections/education", json={**EDUCATION, "yearOfPassing": "2024"})
    assert year.get_json()["error"] == "yearOfPassing must be a number"

    updated = auth_client.put("/api/profile/sections/education/0", json={**EDUCATION, "level": "Masters"})
    assert updated.status_code == 200
    assert updated.get_json()["entries"][0]["level"] == "Masters"

    assert auth_client.put("/api/profile/sections/education/3", json=EDUCATION).status_code == 404

    auth_client.post("/api/profile/sections/achievements", json="Hackathon winner")
    achievements = auth_client.get("/api/profile/sections/achievements").get_json()["entries"]
    assert achievements == ["Hackathon winner"]

    assert auth_client.delete("/api/profile/sections/education/0").get_json()["entries"] == []
    assert auth_client.delete("/api/profile/sections/education/0").status_code == 404


def test_section_settings_defaults_and_update(auth_client):
    settings = auth_client.get("/api/section-settings").get_json()["settings"]
    assert len(settings) == 13
    assert settings[0]["sectionName"] == "personalDetails"
    assert all(setting["isVisible"] for setting in settings)

    resp = auth_client.put("/api/section-settings", json={"settings": [
        {"sectionName": "projects", "isVisible": False},
        {"sectionName": "skills", "sortOrder": 0},
    ]})
    assert resp.status_code == 200
    by_name = {s["sectionName"]: s for s in resp.get_json()["settings"]}
    assert by_name["projects"]["isVisible"] is False
    assert by_name["skills"]["sortOrder"] == 0

    bad = auth_client.put("/api/section-settings", json=[{"sectionName": "secrets"}])
    assert bad.status_code == 400


def test_public_portfolio_visibility_and_view_count(auth_client, other_client, client):
    owner_id = auth_client.user_id
    assert client.get(f"/api/portfolio/{owner_id}").status_code == 404

    auth_client.put("/api/profile", json={"isPublic": True})
    auth_client.put("/api/section-settings", json=[{"sectionName": "contactDetails", "isVisible": False}])

    resp = other_client.get(f"/api/portfolio/{owner_id}")
    assert resp.status_code == 200
    portfolio = resp.get_json()["portfolio"]
    assert portfolio["user"]["fullName"] == "Test User"
    names = [section["name"] for section in portfolio["sections"]]
    assert "contactDetails" not in names
    assert names[0] == "personalDetails"

    client.get(f"/api/portfolio/{owner_id}")
    auth_client.get(f"/api/portfolio/{owner_id}")

    stats = auth_client.get("/api/stats").get_json()["stats"]
    assert stats["portfolioViews"] == 2

    assert client.get("/api/portfolio/9999").status_code == 404
