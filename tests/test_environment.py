"""Tests for Environment, loaders, layouts and the module-level API."""

import logging
from pathlib import Path

import pytest

import mandira
from mandira import (
    DEFAULT_SUFFIXES,
    DictLoader,
    Environment,
    FileSystemLoader,
    ParseError,
    Template,
    TemplateNotFoundError,
    get_default_environment,
    is_template,
)


class TestEnvironment:
    """Environment configuration."""

    def test_from_string(self, env):
        template = env.from_string("Hello {{name}}", name="greet")
        assert isinstance(template, Template)
        assert template.name == "greet"
        assert template.render(name="Ann") == "Hello Ann"

    def test_autoescape(self, env, env_raw):
        assert env.render("{{v}}", v="<i>") == "&lt;i&gt;"
        assert env_raw.render("{{v}}", v="<i>") == "<i>"
        assert env_raw.render("{{{v}}}", v="<i>") == "<i>"

    def test_get_template_without_loader(self, env):
        with pytest.raises(TemplateNotFoundError, match="no loader configured"):
            env.get_template("page.mnd")

    def test_from_file(self, env, template_dir):
        template = env.from_file(template_dir / "index.mnd")
        assert template.name == "index.mnd"
        assert template.filename == str(template_dir / "index.mnd")
        assert template.render(site="x") == "Home of x"

    def test_from_missing_file(self, env, tmp_path):
        with pytest.raises(TemplateNotFoundError):
            env.from_file(tmp_path / "missing.mnd")

    def test_render_file(self, env, template_dir):
        assert env.render_file(template_dir / "pages" / "about.mda", site="docs") == "About DOCS"

    def test_render_in_layout(self, env):
        out = env.render_in_layout("<b>{{name}}</b>", "<main>{{{content}}}</main>", name="Ann")
        assert out == "<main><b>Ann</b></main>"

    def test_layout_sees_outer_context(self, env):
        out = env.render_in_layout("body", "{{title}}: {{{content}}}", {"title": "Home"})
        assert out == "Home: body"

    def test_escaped_content_in_layout_is_escaped_again(self, env):
        out = env.render_in_layout("{{v}}", "{{content}}", v="<")
        assert out == "&amp;lt;"

    def test_render_file_in_layout(self, env, template_dir):
        out = env.render_file_in_layout(
            template_dir / "index.mnd", template_dir / "layout.mandira", site="S"
        )
        assert out == "[Home of S]"

    def test_repr(self, env):
        assert repr(env) == "<Environment loader=None autoescape=True>"


class TestDictLoader:
    """In-memory loader."""

    def test_get_template(self, env_with_loader):
        template = env_with_loader.get_template("greeting.mnd")
        assert template.render(name="World") == "Hello, World!"

    def test_template_is_cached(self, env_with_loader):
        first = env_with_loader.get_template("greeting.mnd")
        assert env_with_loader.get_template("greeting.mnd") is first

    def test_list_template(self, env_with_loader):
        out = env_with_loader.get_template("list.mnd").render(items=["a", "b"])
        assert out == "1. a\n2. b\n"

    def test_list_templates(self, env_with_loader):
        assert env_with_loader.loader.list_templates() == [
            "greeting.mnd",
            "layout.mnd",
            "list.mnd",
        ]

    def test_not_found_suggests_close_match(self, env_with_loader):
        with pytest.raises(TemplateNotFoundError, match="Did you mean 'greeting.mnd'"):
            env_with_loader.get_template("greting.mnd")

    def test_layout_from_loader(self, env_with_loader):
        page = env_with_loader.get_template("greeting.mnd")
        layout = env_with_loader.get_template("layout.mnd")
        assert page.render_in_layout(layout, name="A") == "<html><body>Hello, A!</body></html>"

    def test_templates_use_bound_environment_filters(self):
        loader = DictLoader({"t.mnd": "{{x|shout}}"})
        env = Environment(loader=loader)
        env.add_filter("shout", lambda v: v.upper() + "!")
        assert env.get_template("t.mnd").environment is env
        assert env.get_template("t.mnd").render(x="a") == "A!"

    def test_unbound_loader_uses_default_environment(self):
        loader = DictLoader({"t.mnd": "x"})
        assert loader.get("t.mnd").environment is get_default_environment()

    def test_parse_error_propagates(self):
        env = Environment(loader=DictLoader({"bad.mnd": "{{#open}}"}))
        with pytest.raises(ParseError) as exc_info:
            env.get_template("bad.mnd")
        assert exc_info.value.name == "bad.mnd"


class TestFileSystemLoader:
    """Directory loader in lazy and preload modes."""

    def test_lazy_get(self, template_dir):
        loader = FileSystemLoader(template_dir)
        env = Environment(loader=loader)
        assert not loader.loaded
        assert env.get_template("pages/about.mda").render(site="x") == "About X"
        assert loader.cache == {}

    def test_lazy_not_found(self, template_dir):
        loader = FileSystemLoader(template_dir)
        with pytest.raises(TemplateNotFoundError, match="missing.mnd"):
            loader.get("missing.mnd")

    @pytest.mark.parametrize("name", ["../secret.mnd", "pages/../../secret.mnd"])
    def test_lazy_rejects_names_outside_root(self, tmp_path, name):
        root = tmp_path / "site"
        root.mkdir()
        (tmp_path / "secret.mnd").write_text("secret", encoding="utf-8")
        loader = FileSystemLoader(root)
        with pytest.raises(TemplateNotFoundError, match="outside the loader root"):
            loader.get(name)

    def test_lazy_rejects_absolute_path(self, tmp_path):
        root = tmp_path / "site"
        root.mkdir()
        secret = tmp_path / "secret.mnd"
        secret.write_text("secret", encoding="utf-8")
        with pytest.raises(TemplateNotFoundError, match="outside the loader root"):
            FileSystemLoader(root).get(str(secret))

    def test_lazy_reads_changes(self, template_dir):
        loader = FileSystemLoader(template_dir)
        (template_dir / "index.mnd").write_text("changed", encoding="utf-8")
        assert loader.get("index.mnd").render() == "changed"

    def test_list_templates_skips_other_files(self, template_dir):
        loader = FileSystemLoader(template_dir)
        assert loader.list_templates() == ["index.mnd", "layout.mandira", "pages/about.mda"]

    def test_preload(self, template_dir):
        loader = FileSystemLoader(template_dir, preload=True)
        assert loader.loaded
        assert sorted(loader.cache) == ["index.mnd", "layout.mandira", "pages/about.mda"]
        env = Environment(loader=loader)
        assert env.get_template("index.mnd").render(site="S") == "Home of S"

    def test_preload_serves_from_cache(self, template_dir):
        loader = FileSystemLoader(template_dir, preload=True)
        (template_dir / "index.mnd").write_text("changed", encoding="utf-8")
        assert loader.get("index.mnd").render(site="S") == "Home of S"
        loader.refresh()
        assert loader.get("index.mnd").render() == "changed"

    def test_preload_misses_new_files_until_refresh(self, template_dir):
        loader = FileSystemLoader(template_dir, preload=True)
        (template_dir / "new.mnd").write_text("new", encoding="utf-8")
        with pytest.raises(TemplateNotFoundError):
            loader.get("new.mnd")
        loader.refresh()
        assert loader.get("new.mnd").render() == "new"

    def test_preload_not_found_suggests(self, template_dir):
        loader = FileSystemLoader(template_dir, preload=True)
        with pytest.raises(TemplateNotFoundError, match="Did you mean 'index.mnd'"):
            loader.get("indx.mnd")

    def test_preload_logs(self, template_dir, caplog):
        with caplog.at_level(logging.INFO, logger="mandira.environment.loaders"):
            FileSystemLoader(template_dir, preload=True)
        assert "Loaded 3 template(s)" in caplog.text

    def test_bind_reparses_preloaded(self, template_dir):
        loader = FileSystemLoader(template_dir, preload=True)
        env = Environment(loader=loader)
        assert loader.get("index.mnd").environment is env

    def test_add(self, template_dir):
        env = Environment()
        for preload in (False, True):
            loader = FileSystemLoader(template_dir, preload=preload)
            loader.add("extra", env.from_string("extra {{x}}"))
            assert loader.get("extra").render(x=1) == "extra 1"
            assert "extra" in loader.list_templates()

    def test_added_templates_survive_refresh(self, template_dir):
        env = Environment()
        loader = FileSystemLoader(template_dir, preload=True)
        loader.add("extra", env.from_string("kept"))
        loader.refresh()
        assert loader.get("extra").render() == "kept"

    def test_suffix_filter(self, tmp_path):
        (tmp_path / "a.html").write_text("{{x}}", encoding="utf-8")
        (tmp_path / "b.mnd").write_text("{{x}}", encoding="utf-8")
        loader = FileSystemLoader(tmp_path, preload=True, suffixes=(".html",))
        assert list(loader.cache) == ["a.html"]

    def test_broken_template_fails_preload(self, tmp_path):
        (tmp_path / "bad.mnd").write_text("{{#open}}", encoding="utf-8")
        with pytest.raises(ParseError):
            FileSystemLoader(tmp_path, preload=True)

    def test_repr(self, template_dir):
        assert "preload=False" in repr(FileSystemLoader(template_dir))


class TestIsTemplate:
    @pytest.mark.parametrize("path", ["a.mnd", "dir/b.mandira", Path("c.mda")])
    def test_templates(self, path):
        assert is_template(path)

    @pytest.mark.parametrize("path", ["a.html", "mnd", "a.mnd.bak"])
    def test_non_templates(self, path):
        assert not is_template(path)

    def test_default_suffixes(self):
        assert DEFAULT_SUFFIXES == (".mnd", ".mandira", ".mda")


class TestModuleAPI:
    """Functions backed by the default environment."""

    def test_render(self):
        assert mandira.render("Hello, {{ name }}!", {"name": "World"}) == "Hello, World!"

    def test_parse(self):
        template = mandira.parse("{{x}}", name="x.mnd")
        assert template.name == "x.mnd"
        assert template.environment is get_default_environment()

    def test_parse_file_and_render_file(self, template_dir):
        path = template_dir / "index.mnd"
        assert mandira.parse_file(path).render(site="s") == "Home of s"
        assert mandira.render_file(path, site="s") == "Home of s"

    def test_render_in_layout(self):
        assert mandira.render_in_layout("b", "<{{{content}}}>") == "<b>"

    def test_render_file_in_layout(self, template_dir):
        out = mandira.render_file_in_layout(
            template_dir / "index.mnd", template_dir / "layout.mandira", site="s"
        )
        assert out == "[Home of s]"

    def test_add_and_get_filter(self):
        mandira.add_filter("module_level_shout", lambda v: "shout")
        assert mandira.get_filter("module_level_shout") is not None
        assert mandira.render("{{x|module_level_shout}}", x=1) == "shout"

    def test_default_environment_is_singleton(self):
        assert get_default_environment() is get_default_environment()

    def test_version(self):
        assert mandira.__version__ == "0.1.0"
