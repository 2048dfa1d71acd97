"""DictLoader -- in-memory templates without filesystem.

Templates from a dictionary, with a page rendered inside a layout.
Use case: tests, generated templates, single-file apps.

Run:
    python app.py
"""

from mandira import DictLoader, Environment

templates = {
    "layout.mnd": """\
<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
    <nav>
    {{#nav_items}}
        <a href="{{ url }}">{{ label }}</a>
    {{/nav_items}}
    </nav>
    <main>{{{ content }}}</main>
</body>
</html>
""",
    "page.mnd": """\
    <h1>{{ heading }}</h1>
    <p>{{ message }}</p>
""",
}

env = Environment(loader=DictLoader(templates))
layout = env.get_template("layout.mnd")
template = env.get_template("page.mnd")

output = template.render_in_layout(
    layout,
    title="DictLoader Demo",
    nav_items=[
        {"url": "/", "label": "Home"},
        {"url": "/about", "label": "About"},
    ],
    heading="In-Memory Templates",
    message="No filesystem required. Templates loaded from a dict & rendered in a layout.",
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
