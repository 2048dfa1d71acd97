"""Custom filters -- extending Mandira with add_filter and @env.filter().

Filter arguments are coerced from their annotations, so ``money("€")`` and
``pluralize(count)`` receive strings and ints however they were written.

Run:
    python app.py
"""

from mandira import Environment

env = Environment()


# Custom filter: add_filter()
def money(amount: float, currency: str = "$") -> str:
    """Format amount as currency."""
    return f"{currency}{amount:,.2f}"


env.add_filter("money", money)


# Custom filter: @env.filter() decorator
@env.filter()
def pluralize(n: int, singular: str, plural: str) -> str:
    """Return singular or plural form based on count."""
    return singular if n == 1 else plural


@env.filter("line_total")
def line_total(item) -> float:
    return item["price"] * item["qty"]


template = env.from_string(
    """\
Invoice ({{ item_count }} {{ item_count|pluralize("item", "items") }})
{{#items}}
- {{ name }}: {{ .|line_total|money }}
{{/items}}
Total: {{ total|money }} / {{ total|money("€") }}
{{?if item_count|divisibleby(3)}}
Bulk discount applies.
{{/if}}"""
)

output = template.render(
    total=1234.56,
    item_count=3,
    items=[
        {"name": "Widget A", "price": 19.99, "qty": 2},
        {"name": "Widget B", "price": 5.00, "qty": 1},
    ],
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
