"""Tests for lint endpoints."""

import pytest
from fastapi.testclient import TestClient


class TestLintEndpoint:
    """Test POST /api/lint."""

    @pytest.fixture
    def client(self):
        from logmsglint.main import app
        with TestClient(app) as client:
            yield client

    def test_lint_returns_diagnostics(self, client, sample_structlog):
        response = client.post("/api/lint", json={"source": sample_structlog, "file_path": "events.py"})

        assert response.status_code == 200
        data = response.json()
        assert data["file_path"] == "events.py"
        assert [d["code"] for d in data["diagnostics"]] == ["LML001", "LML003"]
        assert data["diagnostics"][0]["start_line"] == 7
        assert data["diagnostics"][0]["fix"]["edits"][0]["new_text"] == '"user logged in!"'
        assert data["fixed_source"] is None

    def test_clean_source(self, client, sample_clean):
        response = client.post("/api/lint", json={"source": sample_clean})

        assert response.status_code == 200
        assert response.json()["diagnostics"] == []

    def test_custom_patterns(self, client):
        source = "import logging\nlogging.info('ssn stored')\n"
        response = client.post("/api/lint", json={"source": source, "sensitive_patterns": [r"\bssn\b"]})

        assert [d["code"] for d in response.json()["diagnostics"]] == ["LML004"]

    def test_invalid_pattern_returns_422(self, client):
        response = client.post("/api/lint", json={"source": "x = 1\n", "sensitive_patterns": ["("]})

        assert response.status_code == 422
        assert "(" in response.json()["detail"]

    def test_fix_returns_fixed_source(self, client, sample_stdlib_logging):
        response = client.post("/api/lint", json={"source": sample_stdlib_logging, "fix": True})

        data = response.json()
        assert data["fixes_applied"] == 1
        assert 'logger.info("starting server")' in data["fixed_source"]

    def test_lone_surrogate_escape(self, client):
        """Literals decoding to lone surrogates still serialise."""
        source = 'import logging\nlogging.info("Hello \\ud800")\n'
        response = client.post("/api/lint", json={"source": source, "fix": True})

        assert response.status_code == 200
        data = response.json()
        assert data["diagnostics"][0]["fix"]["edits"][0]["new_text"] == '"hello \\ud800"'
        assert 'logging.info("hello \\ud800")' in data["fixed_source"]

    def test_missing_source_rejected(self, client):
        response = client.post("/api/lint", json={})

        assert response.status_code == 422

    def test_syntax_errors_listed(self, client):
        response = client.post("/api/lint", json={"source": "def broken(:\n"})

        assert response.json()["errors"] == ["<string>: syntax error"]


class TestRulesEndpoint:
    """Test GET /api/lint/rules."""

    @pytest.fixture
    def client(self):
        from logmsglint.main import app
        with TestClient(app) as client:
            yield client

    def test_lists_rules(self, client):
        response = client.get("/api/lint/rules")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 4
        assert [r["code"] for r in data["rules"]] == ["LML001", "LML002", "LML003", "LML004"]
        assert data["rules"][0]["name"] == "lowercase_start"
