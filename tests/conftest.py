"""Pytest configuration and fixtures for Mandira tests."""

import pytest

from mandira import DictLoader, Environment


@pytest.fixture
def env():
    """Create a basic Mandira Environment."""
    return Environment()


@pytest.fixture
def env_raw():
    """Create a Mandira Environment with autoescape disabled."""
    return Environment(autoescape=False)


@pytest.fixture
def env_with_loader():
    """Create a Mandira Environment with DictLoader and test templates."""
    loader = DictLoader(
        {
            "layout.mnd": "<html><body>{{{content}}}</body></html>",
            "greeting.mnd": "Hello, {{name}}!",
            "list.mnd": "{{#items}}{{.index1}}. {{.}}\n{{/items}}",
        }
    )
    return Environment(loader=loader)


@pytest.fixture
def template_dir(tmp_path):
    """A directory tree of template files plus one non-template file."""
    (tmp_path / "pages").mkdir()
    (tmp_path / "index.mnd").write_text("Home of {{site}}", encoding="utf-8")
    (tmp_path / "layout.mandira").write_text("[{{{content}}}]", encoding="utf-8")
    (tmp_path / "pages" / "about.mda").write_text("About {{site|upper}}", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("{{not a template", encoding="utf-8")
    return tmp_path
