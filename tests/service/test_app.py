"""HTTP service tests."""

from __future__ import annotations

import json

from fastapi.testclient import TestClient

from autodocs.errors import ProseServiceError
from autodocs.models import Module
from autodocs.prose import FunctionProse, Prose
from autodocs.service.app import create_app


class FailingProvider:
    def generate(self, module: Module) -> Prose:
        raise ProseServiceError("quota exceeded", path=module.path)


class StyleProvider:
    def __init__(self, style: str) -> None:
        self.style = style

    def generate(self, module: Module) -> Prose:
        return Prose(
            description=f"{self.style} overview",
            functions={f.name: FunctionProse(description="Documented.") for f in module.functions},
        )


def test_health_endpoint() -> None:
    client = TestClient(create_app())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generate_docs_returns_every_format() -> None:
    client = TestClient(create_app(StyleProvider))

    response = client.post(
        "/api/generate-docs",
        json={
            "code": "export class Dog {\n  bark() {}\n}\nexport function pet(dog) {}\n",
            "language": "javascript",
            "format": "html",
            "style": "concise",
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["format"] == "html"
    assert body["content"] == body["html"]
    assert "concise overview" in body["markdown"]
    assert json.loads(body["json"])["meta"]["file"] == "snippet.js"
    assert body["stats"] == {"functions_count": 1, "classes_count": 1, "exports_count": 2}
    assert body["prose_error"] is None
    assert body["processing_time_ms"] >= 0


def test_generate_docs_uses_filename() -> None:
    client = TestClient(create_app())

    response = client.post(
        "/api/generate-docs",
        json={"code": "package main\n\nfunc Run() {}\n", "language": "go", "filename": "runner.go"},
    )

    assert response.status_code == 200
    assert "# runner.go" in response.json()["markdown"]


def test_generate_docs_reports_prose_error() -> None:
    client = TestClient(create_app(lambda style: FailingProvider()))

    response = client.post("/api/generate-docs", json={"code": "def f():\n    pass\n", "language": "python"})

    assert response.status_code == 200
    assert response.json()["prose_error"] == "quota exceeded"


def test_generate_docs_syntax_error_is_bad_request() -> None:
    client = TestClient(create_app())

    response = client.post(
        "/api/generate-docs", json={"code": "function (a, {\n", "language": "javascript"}
    )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("snippet.js: ")


def test_generate_docs_validates_payload() -> None:
    client = TestClient(create_app())

    assert client.post("/api/generate-docs", json={"code": "", "language": "python"}).status_code == 422
    assert client.post("/api/generate-docs", json={"code": "x", "language": "ruby"}).status_code == 422
