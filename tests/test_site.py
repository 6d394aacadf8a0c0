"""
Tests for the server-rendered public page.
"""

from routes.site import group_skills


def test_placeholder_without_portfolio(client):
    res = client.get("/")

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/html")
    assert "Portfolio coming soon" in res.text


def test_renders_portfolio(client, portfolio):
    res = client.get("/")

    assert res.status_code == 200
    assert "<h1>Ada Lovelace</h1>" in res.text
    assert "https://github.com/ada" in res.text
    assert "Portfolio coming soon" not in res.text


def test_featured_projects_come_first(client, portfolio):
    html = client.get("/").text

    assert html.index("Bernoulli Numbers") < html.index("Analytical Engine")


def test_only_active_services_are_shown(client, auth_headers, portfolio):
    client.post("/api/services", json={"title": "Consulting", "description": "Advice"}, headers=auth_headers)
    client.post(
        "/api/services",
        json={"title": "Retired offering", "description": "Gone", "isActive": False},
        headers=auth_headers,
    )

    html = client.get("/").text

    assert "Consulting" in html
    assert "Retired offering" not in html


def test_group_skills_uses_category_order():
    skills = [
        {"name": "Docker", "category": "DevOps"},
        {"name": "React", "category": "Frontend"},
        {"name": "Vue", "category": "Frontend"},
    ]

    groups = group_skills(skills)

    assert list(groups) == ["Frontend", "DevOps"]
    assert [s["name"] for s in groups["Frontend"]] == ["React", "Vue"]
