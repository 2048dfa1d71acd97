from __future__ import annotations

# The same pages written for each engine. Output differs in whitespace only.
MANDIRA_TEMPLATES = {
    "minimal.mnd": "Hello, {{name}}!",
    "small.mnd": (
        "<h1>{{title}}</h1>\n"
        "{{#user}}\n"
        "<p>{{name|title}} ({{visits}} visits){{?if admin}} [admin]{{/if}}</p>\n"
        "{{/user}}\n"
        "<ul>\n"
        "{{#tags}}\n"
        "<li>{{.index1}}. {{.|upper}}</li>\n"
        "{{/tags}}\n"
        "</ul>\n"
    ),
    "medium.mnd": (
        "<table>\n"
        "{{#items}}\n"
        '<tr><td>{{id}}</td><td>{{name|upper}}</td><td>{{price|format("%.2f")}}</td></tr>\n'
        "{{/items}}\n"
        "</table>\n"
        '<p>{{categories|join(", ")}}</p>\n'
        "<p>{{var_0}} {{var_40}} {{var_79}}</p>\n"
    ),
    "large.mnd": (
        "<ul>\n"
        "{{#items}}\n"
        "<li>{{name}} "
        "{{?if on_sale}}sale{{?else}}{{#data}}{{x}}/{{y}}{{/data}}{{/if}}</li>\n"
        "{{/items}}\n"
        "</ul>\n"
    ),
}

JINJA2_TEMPLATES = {
    "minimal.html": "Hello, {{ name }}!",
    "small.html": (
        "<h1>{{ title }}</h1>\n"
        "<p>{{ user.name|title }} ({{ user.visits }} visits)"
        "{% if user.admin %} [admin]{% endif %}</p>\n"
        "<ul>\n"
        "{% for tag in tags %}<li>{{ loop.index }}. {{ tag|upper }}</li>\n{% endfor %}"
        "</ul>\n"
    ),
    "medium.html": (
        "<table>\n"
        "{% for item in items %}"
        '<tr><td>{{ item.id }}</td><td>{{ item.name|upper }}</td>'
        '<td>{{ "%.2f"|format(item.price) }}</td></tr>\n'
        "{% endfor %}"
        "</table>\n"
        '<p>{{ categories|join(", ") }}</p>\n'
        "<p>{{ var_0 }} {{ var_40 }} {{ var_79 }}</p>\n"
    ),
    "large.html": (
        "<ul>\n"
        "{% for item in items %}<li>{{ item.name }} "
        "{% if item.on_sale %}sale{% else %}{{ item.data.x }}/{{ item.data.y }}{% endif %}"
        "</li>\n{% endfor %}"
        "</ul>\n"
    ),
}
