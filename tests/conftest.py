"""
Shared fixtures. Every provider HTTP call is mocked; no real tokens needed.
"""

import json
from unittest.mock import MagicMock

import pytest

from src.utils.config import Settings


@pytest.fixture
def settings():
    """Settings isolated from the developer's .env"""
    return Settings(
        _env_file=None,
        vercel_token="vercel-test-token",
        vercel_team_id="",
        netlify_token="netlify-test-token",
        poll_interval_seconds=1,
        poll_timeout_seconds=3,
        upload_concurrency=4,
    )


@pytest.fixture
def make_response():
    """Factory for fake ``requests.Response`` objects"""

    def _make(status_code=200, json_data=None, text=None):
        response = MagicMock()
        response.status_code = status_code
        if json_data is None and text is not None:
            response.json.side_effect = ValueError("No JSON object could be decoded")
            response.text = text
        else:
            payload = {} if json_data is None else json_data
            response.json.return_value = payload
            response.text = text if text is not None else json.dumps(payload)
        return response

    return _make


@pytest.fixture
def build_dir(tmp_path):
    """A small rendered site with a config sidecar and a duplicated asset"""
    root = tmp_path / "build"
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_bytes(b"<html>home</html>")
    (root / "about.html").write_bytes(b"<html>about</html>")
    (root / "assets" / "logo.svg").write_bytes(b"<svg/>")
    (root / "assets" / "logo-copy.svg").write_bytes(b"<svg/>")
    (root / "config.schema.json").write_text('{"type": "object"}')
    return root
