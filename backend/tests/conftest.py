from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from backend.app.main import create_app
from backend.app.config import AppConfig

from graphmerge.graph.graph_schema import Graph

from backend.tests.graph_factory import make_graph


@pytest.fixture()
def chain_graph() -> Graph:
    # A -> B -> C, only C is special
    return make_graph(["A", "B", ("C", "leaf")], [("A", "B"), ("B", "C")])


@pytest.fixture()
def report_graph() -> Graph:
    # P1 -> C1 -> R1
    return make_graph(
        [("R1", "reporter"), ("C1", "category"), "P1"],
        [("P1", "C1"), ("C1", "R1")],
    )


@pytest.fixture()
def client():
    app = create_app(AppConfig())
    with TestClient(app) as test_client:
        yield test_client
