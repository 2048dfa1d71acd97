"""Hello World -- the simplest mandira example.

Parse a template from a string and render it with context variables.
No templates directory needed.

Run:
    python app.py
"""

from mandira import Environment

env = Environment()

# Parse from string
template = env.from_string("Hello, {{ name }}!")

# Render with context
output = template.render(name="World")


def main() -> None:
    print(output)
    print()

    # Multiple renders with different context
    for name in ["Mandira", "Mustache", "Python"]:
        print(template.render({"name": name}))


if __name__ == "__main__":
    main()
