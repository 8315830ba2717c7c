"""
Tests for the Vercel adapter.
requests.request is patched; no network calls are made.
"""

import threading
import time
from unittest.mock import patch

import pytest
import requests

from src.api.exceptions import (
    AliasError,
    AuthenticationError,
    DeploymentCreateError,
    DeploymentStatusError,
    NetworkError,
    RateLimitError,
    UploadError,
)
from src.api.vercel_client import VercelClient
from src.models.artifacts import BuildArtifact
from src.models.deployment import DeploymentState, PipelineStage, UploadOutcome
from src.services.content_hasher import build_bundle, hash_artifact

REQUEST = "src.api.base_provider.requests.request"

INDEX = BuildArtifact("index.html", b"<html>home</html>")
DIGEST = hash_artifact(INDEX)


@pytest.fixture
def client(settings):
    return VercelClient(settings)


class TestUpload:

    def test_200_is_stored(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, {})) as mock_request:
            result = client.upload(DIGEST, INDEX.content)

        assert result.outcome is UploadOutcome.STORED
        kwargs = mock_request.call_args.kwargs
        assert kwargs["method"] == "POST"
        assert kwargs["url"].endswith("/v2/files")
        assert kwargs["data"] == INDEX.content
        assert kwargs["headers"]["x-vercel-digest"] == DIGEST.sha1
        assert kwargs["headers"]["Content-Length"] == str(DIGEST.byte_length)
        assert kwargs["headers"]["Authorization"] == "Bearer vercel-test-token"
        assert kwargs["timeout"] == client.timeout

    def test_409_is_already_exists_not_an_error(self, client, make_response):
        response = make_response(409, {"error": {"code": "file_exists"}})
        with patch(REQUEST, return_value=response):
            result = client.upload(DIGEST, INDEX.content)

        assert result.outcome is UploadOutcome.ALREADY_EXISTS

    def test_other_status_raises_upload_error_with_capped_body(self, client, make_response):
        response = make_response(400, text="x" * 5000)
        with patch(REQUEST, return_value=response):
            with pytest.raises(UploadError) as excinfo:
                client.upload(DIGEST, INDEX.content)

        assert excinfo.value.status_code == 400
        assert len(excinfo.value.message) < 1000
        assert "truncated" in excinfo.value.message

    def test_401_maps_to_authentication_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(401, {"error": "forbidden"})):
            with pytest.raises(AuthenticationError):
                client.upload(DIGEST, INDEX.content)

    def test_429_maps_to_rate_limit_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(429, {})):
            with pytest.raises(RateLimitError):
                client.upload(DIGEST, INDEX.content)

    def test_team_id_is_sent_when_configured(self, settings, make_response):
        settings.vercel_team_id = "team_123"
        client = VercelClient(settings)
        with patch(REQUEST, return_value=make_response(200, {})) as mock_request:
            client.upload(DIGEST, INDEX.content)
        assert mock_request.call_args.kwargs["params"] == {"teamId": "team_123"}


class TestTransportRetry:

    @patch("tenacity.nap.time.sleep")
    def test_network_errors_are_retried_then_raised(self, mock_sleep, client):
        with patch(REQUEST, side_effect=requests.exceptions.ConnectionError("reset")) as mock_request:
            with pytest.raises(NetworkError):
                client.poll_status("dpl_1")

        assert mock_request.call_count == 3

    @patch("tenacity.nap.time.sleep")
    def test_recovers_after_a_transient_timeout(self, mock_sleep, client, make_response):
        responses = [requests.exceptions.Timeout("slow"), make_response(200, {"readyState": "READY"})]
        with patch(REQUEST, side_effect=responses) as mock_request:
            assert client.poll_status("dpl_1") is DeploymentState.READY
        assert mock_request.call_count == 2

    def test_http_rejections_are_not_retried(self, client, make_response):
        with patch(REQUEST, return_value=make_response(400, {"error": "bad"})) as mock_request:
            with pytest.raises(DeploymentCreateError):
                client.create_deployment("acme", [DIGEST])
        assert mock_request.call_count == 1


class TestCreateDeployment:

    def test_manifest_references_files_by_digest(self, client, make_response):
        response = make_response(200, {"id": "dpl_1", "url": "acme-abc123.vercel.app"})
        with patch(REQUEST, return_value=response) as mock_request:
            created = client.create_deployment("acme", [DIGEST])

        assert created.deployment_id == "dpl_1"
        assert created.url == "https://acme-abc123.vercel.app"

        kwargs = mock_request.call_args.kwargs
        assert kwargs["url"].endswith("/v13/deployments")
        assert kwargs["params"]["skipAutoDetectionConfirmation"] == 1
        payload = kwargs["json"]
        assert payload["name"] == "acme"
        assert payload["target"] == "production"
        assert payload["files"] == [{"file": "index.html", "sha": DIGEST.sha1, "size": DIGEST.byte_length}]

    def test_response_without_url_is_an_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, {"id": "dpl_1"})):
            with pytest.raises(DeploymentCreateError):
                client.create_deployment("acme", [DIGEST])


class TestPublish:

    def test_uploads_every_distinct_file_before_creating(self, client, make_response):
        bundle = build_bundle([
            INDEX,
            BuildArtifact("a.svg", b"<svg/>"),
            BuildArtifact("b.svg", b"<svg/>"),
        ])
        calls = []

        def fake_request(method, url, **kwargs):
            calls.append(url.rsplit("/", 1)[-1])
            if url.endswith("/v2/files"):
                return make_response(409, {})
            return make_response(200, {"id": "dpl_1", "url": "acme-x.vercel.app"})

        stages = []
        with patch(REQUEST, side_effect=fake_request):
            created = client.publish("acme", bundle, on_stage=stages.append)

        assert stages == [PipelineStage.UPLOADING, PipelineStage.CREATING]
        assert calls.count("files") == 2
        assert calls[-1] == "deployments"
        assert created.deployment_id == "dpl_1"

    def test_failed_upload_aborts_before_creating(self, client, make_response):
        bundle = build_bundle([INDEX])

        def fake_request(method, url, **kwargs):
            if url.endswith("/v2/files"):
                return make_response(500, {"error": "boom"})
            raise AssertionError("deployment must not be created")

        with patch(REQUEST, side_effect=fake_request):
            with pytest.raises(UploadError):
                client.publish("acme", bundle)


class TestUploadFanOut:

    def test_uploads_run_in_parallel(self, client, make_response):
        bundle = build_bundle([INDEX, BuildArtifact("app.js", b"console.log(1)")])
        both_in_flight = threading.Barrier(2, timeout=5)

        def fake_request(method, url, **kwargs):
            both_in_flight.wait()
            return make_response(200, {})

        with patch(REQUEST, side_effect=fake_request):
            results = client._upload_all(bundle.unique(), bundle)

        assert len(results) == 2
        assert not both_in_flight.broken

    def test_first_failure_cancels_queued_uploads(self, settings, make_response):
        settings.upload_concurrency = 1
        client = VercelClient(settings)
        bundle = build_bundle([BuildArtifact(f"page-{i}.html", f"page {i}".encode()) for i in range(10)])
        calls = []

        def fake_request(method, url, **kwargs):
            calls.append(kwargs["headers"]["x-vercel-digest"])
            if len(calls) == 1:
                return make_response(500, {"error": "boom"})
            time.sleep(0.2)
            return make_response(200, {})

        with patch(REQUEST, side_effect=fake_request):
            with pytest.raises(UploadError):
                client._upload_all(bundle.unique(), bundle)

        assert len(calls) <= 2


class TestStatusAndAlias:

    @pytest.mark.parametrize("ready_state, expected", [
        ("READY", DeploymentState.READY),
        ("ERROR", DeploymentState.ERROR),
        ("CANCELED", DeploymentState.ERROR),
        ("BUILDING", DeploymentState.BUILDING),
        ("QUEUED", DeploymentState.BUILDING),
        (None, DeploymentState.BUILDING),
    ])
    def test_ready_state_mapping(self, client, make_response, ready_state, expected):
        with patch(REQUEST, return_value=make_response(200, {"readyState": ready_state})):
            assert client.poll_status("dpl_1") is expected

    def test_assign_alias_returns_https_url(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, {"alias": "acme.vercel.app"})) as mock_request:
            url = client.assign_alias("dpl_1", "acme.vercel.app")

        assert url == "https://acme.vercel.app"
        assert mock_request.call_args.kwargs["json"] == {"alias": "acme.vercel.app"}

    def test_alias_rejection_raises_alias_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(403, {"error": "not allowed"})):
            with pytest.raises(AliasError):
                client.assign_alias("dpl_1", "acme.vercel.app")

    def test_alias_with_empty_body_raises_alias_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, text="")):
            with pytest.raises(AliasError) as excinfo:
                client.assign_alias("dpl_1", "acme.vercel.app")

        assert excinfo.value.status_code == 200
        assert "not JSON" in excinfo.value.message

    def test_status_with_html_body_raises_status_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, text="<html>502 Bad Gateway</html>")):
            with pytest.raises(DeploymentStatusError) as excinfo:
                client.poll_status("dpl_1")

        assert "502 Bad Gateway" in excinfo.value.message

    def test_status_with_non_object_body_raises_status_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, ["READY"])):
            with pytest.raises(DeploymentStatusError):
                client.poll_status("dpl_1")

    def test_alias_for(self, client):
        assert client.alias_for("acme") == "acme.vercel.app"


class TestDomains:

    def test_list_domains(self, client, make_response):
        payload = {"domains": [
            {"name": "acme.com", "verified": True, "createdAt": 1700000000000},
            {"name": "www.acme.com", "verified": False},
        ]}
        with patch(REQUEST, return_value=make_response(200, payload)) as mock_request:
            domains = client.list_domains("acme")

        assert mock_request.call_args.kwargs["url"].endswith("/v9/projects/acme/domains")
        assert [d.name for d in domains] == ["acme.com", "www.acme.com"]
        assert domains[0].verified is True
        assert domains[0].created_at.year == 2023
        assert domains[1].created_at is None

    def test_add_domain(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, {"name": "acme.com", "verified": False})) as mock_request:
            domain = client.add_domain("acme", "acme.com")

        kwargs = mock_request.call_args.kwargs
        assert kwargs["url"].endswith("/v10/projects/acme/domains")
        assert kwargs["json"] == {"name": "acme.com"}
        assert domain.name == "acme.com"

    def test_remove_domain(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, {})) as mock_request:
            client.remove_domain("acme", "acme.com")

        kwargs = mock_request.call_args.kwargs
        assert kwargs["method"] == "DELETE"
        assert kwargs["url"].endswith("/v9/projects/acme/domains/acme.com")
