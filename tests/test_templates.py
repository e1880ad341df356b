import pytest

from resume_tailor.core.exceptions import ValidationFailedError
from resume_tailor.services.templates import (
    format_bullet, format_heading, get_template, group_skills_by_category,
    list_templates, spacing_multiplier
)


def test_catalogue_contains_all_templates():
    ids = [t.id for t in list_templates()]
    assert ids == ["modern", "classic", "technical", "creative", "minimal", "sidebar"]
    assert all(0 < t.ats_score <= 100 for t in list_templates())


def test_default_template_is_classic():
    assert get_template(None).id == "classic"


def test_unknown_template():
    with pytest.raises(ValidationFailedError, match="Unknown template: fancy"):
        get_template("fancy")


@pytest.mark.parametrize("template_id,expected", [
    ("classic", "• Shipped it"),
    ("modern", "– Shipped it"),
    ("technical", "→ Shipped it"),
])
def test_format_bullet(template_id, expected):
    assert format_bullet("Shipped it", get_template(template_id)) == expected


def test_format_heading():
    assert format_heading("Experience", get_template("modern")) == "EXPERIENCE"
    assert format_heading("Experience", get_template("classic")) == "Experience"
    underlined = get_template("classic").model_copy(update={"heading_style": "bold-underline"})
    assert format_heading("Skills", underlined) == "SKILLS\n======"


def test_spacing_multiplier():
    assert spacing_multiplier(get_template("technical")) == 0.5
    assert spacing_multiplier(get_template("classic")) == 1.0
    assert spacing_multiplier(get_template("creative")) == 1.5


def test_group_skills_by_category():
    groups = group_skills_by_category(
        ["React", "Node.js", "PostgreSQL", "Docker", "AWS", "TypeScript", "Python", "Figma", "PyTorch"]
    )
    assert groups == {
        "Frontend": ["React", "TypeScript"],
        "Backend": ["Node.js", "Python"],
        "Databases": ["PostgreSQL"],
        "AI/ML": ["PyTorch"],
        "DevOps": ["Docker", "AWS"],
        "Other": ["Figma"],
    }


def test_group_skills_drops_empty_categories():
    assert group_skills_by_category(["Redis"]) == {"Databases": ["Redis"]}
    assert group_skills_by_category([]) == {}


def test_templates_endpoint_is_public(client):
    response = client.get("/api/templates")
    assert response.status_code == 200
    body = response.json()
    assert body[0]["id"] == "modern"
    assert {"colors", "bullet_style", "heading_style", "ats_score"} <= set(body[0])
