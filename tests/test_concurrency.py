"""Concurrent rendering and filter registration."""

import threading
from concurrent.futures import ThreadPoolExecutor

from mandira import Environment

PAGE = """\
<article id="page-{{ page_id }}">
  <h1>{{ title|upper }}</h1>
  {{#tags}}<li>{{.index1}}:{{.}}</li>{{/tags}}
  {{?if page_id > 3}}late{{?else}}early{{/if}}
</article>"""


def expected_page(page_id: int) -> str:
    tags = "".join(f"<li>{n + 1}:tag-{page_id}-{c}</li>" for n, c in enumerate("abc"))
    return (
        f'<article id="page-{page_id}">\n'
        f"  <h1>PAGE {page_id}</h1>\n"
        f"  {tags}\n"
        f"  {'late' if page_id > 3 else 'early'}\n"
        "</article>"
    )


def page_context(page_id: int) -> dict:
    return {
        "page_id": page_id,
        "title": f"Page {page_id}",
        "tags": [f"tag-{page_id}-{c}" for c in "abc"],
    }


class TestConcurrentRendering:
    """One parsed template shared across worker threads."""

    def test_independent_contexts_render_correctly(self):
        template = Environment().from_string(PAGE)
        page_ids = [i % 8 for i in range(400)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda i: template.render(page_context(i)), page_ids))

        for page_id, html in zip(page_ids, results, strict=True):
            assert html == expected_page(page_id)

    def test_same_context_renders_identically(self):
        template = Environment().from_string(PAGE)
        context = page_context(5)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = set(pool.map(lambda _: template.render(context), range(200)))

        assert results == {expected_page(5)}

    def test_add_filter_while_rendering(self):
        env = Environment()
        template = env.from_string("{{ title|upper }}|{{ title|late }}")
        stop = threading.Event()
        registered: list[str] = []

        def writer() -> None:
            n = 0
            while True:
                name = f"extra_{n}"
                env.add_filter(name, lambda value, n=n: f"{value}{n}")
                registered.append(name)
                n += 1
                if stop.is_set():
                    break
            env.add_filter("late", lambda value: value[::-1])

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            with ThreadPoolExecutor(max_workers=8) as pool:
                results = list(pool.map(lambda i: template.render(title=f"t{i}"), range(500)))
        finally:
            stop.set()
            thread.join()

        # "late" is unregistered until the writer stops, so it renders empty
        for i, text in enumerate(results):
            assert text in (f"T{i}|", f"T{i}|" + f"t{i}"[::-1])
        assert registered
        for name in registered:
            assert env.get_filter(name) is not None
        assert template.render(title="ab") == "AB|ba"
