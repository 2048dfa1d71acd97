"""Fixtures for the mandira example apps.

Each example directory holds an ``app.py`` that builds an environment,
renders something and leaves the results in module globals. Tests receive
those globals through ``example_app``.
"""

import runpy
from pathlib import Path
from types import SimpleNamespace

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> SimpleNamespace:
    """Run the app.py beside the requesting test and expose its globals.

    The script runs afresh for every test, so filters an app registers on
    its own environment never leak between tests.
    """
    app_path = Path(request.path).with_name("app.py")
    if not app_path.is_file():
        pytest.fail(f"{request.path.parent.name} has no app.py")
    namespace = runpy.run_path(str(app_path), run_name=f"mandira_example_{app_path.parent.name}")
    return SimpleNamespace(**{k: v for k, v in namespace.items() if not k.startswith("__")})
