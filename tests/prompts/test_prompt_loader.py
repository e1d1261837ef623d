import pytest

from ambient.prompts.loader import PromptLoader, split_front_matter


def test_prompt_loader_strips_front_matter():
    loader = PromptLoader()
    content = loader.load("sql_generation/system.md")
    assert not content.startswith("---")
    assert "expert PostgreSQL SQL query generator" in content


def test_prompt_loader_reads_metadata():
    loader = PromptLoader()
    metadata = loader.get_metadata("sql_evaluation/user.md")
    assert metadata["task"] == "evaluate_sql"


def test_prompt_loader_renders_template():
    loader = PromptLoader()
    rendered = loader.render(
        "sql_generation/user.md",
        schema="public",
        table="users",
        column_lines="  - id: integer NOT NULL",
        sample_size=3,
        sample_data="No sample data available",
        question="How many users signed up?",
    )
    assert not rendered.startswith("---")
    assert 'Generate a SQL query for: "How many users signed up?"' in rendered
    assert "Table: users" in rendered


def test_prompt_loader_requires_variables():
    from jinja2 import UndefinedError

    with pytest.raises(UndefinedError):
        PromptLoader().render("sql_generation/user.md", schema="public")


def test_missing_prompt():
    loader = PromptLoader()
    with pytest.raises(FileNotFoundError):
        loader.load("nope/system.md")
    with pytest.raises(FileNotFoundError):
        loader.render("nope/system.md")


def test_custom_prompt_directory(tmp_path):
    (tmp_path / "greeting.md").write_text("---\nversion: 2\n---\nHello {{ name }}\n")
    loader = PromptLoader(tmp_path)

    assert loader.render("greeting.md", name="analyst") == "Hello analyst"
    assert loader.get_metadata("greeting.md") == {"version": 2}


def test_split_front_matter_without_header():
    assert split_front_matter("plain text") == ({}, "plain text")
