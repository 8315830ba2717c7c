"""
Tests for the Netlify adapter (create-then-upload).
requests.request is patched; no network calls are made.
"""

from unittest.mock import patch

import pytest

from src.api.exceptions import (
    AliasError,
    DeploymentCreateError,
    DeploymentStatusError,
    DomainError,
    UploadError,
)
from src.api.netlify_client import NetlifyClient
from src.models.artifacts import BuildArtifact
from src.models.deployment import DeploymentState, PipelineStage, UploadOutcome
from src.services.content_hasher import build_bundle, hash_artifact

REQUEST = "src.api.base_provider.requests.request"

INDEX = BuildArtifact("index.html", b"<html>home</html>")
ABOUT = BuildArtifact("about/index.html", b"<html>about</html>")
SITE = {"id": "site_1", "name": "acme", "custom_domain": None, "domain_aliases": []}


@pytest.fixture
def client(settings):
    return NetlifyClient(settings)


class FakeNetlify:
    """Routes (method, path) to canned responses and records the call order"""

    def __init__(self, make_response, routes):
        self.make_response = make_response
        self.routes = routes
        self.calls = []

    def __call__(self, method, url, **kwargs):
        path = url.split("/api/v1", 1)[1]
        self.calls.append((method, path, kwargs))
        for (route_method, prefix), (status, body) in self.routes.items():
            if method == route_method and path.startswith(prefix):
                return self.make_response(status, body)
        raise AssertionError(f"Unexpected call: {method} {path}")


class TestCreateDeployment:

    def test_finds_existing_site_and_declares_manifest(self, client, make_response):
        index = hash_artifact(INDEX)
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [{"id": "other", "name": "acme-old"}, SITE]),
            ("POST", "/sites/site_1/deploys"): (200, {
                "id": "dep_1",
                "required": [index.sha1],
                "deploy_ssl_url": "https://dep-1--acme.netlify.app",
            }),
        })

        with patch(REQUEST, side_effect=fake):
            created = client.create_deployment("acme", [index])

        assert created.deployment_id == "dep_1"
        assert created.url == "https://dep-1--acme.netlify.app"
        assert created.required == [index.sha1]
        method, path, kwargs = fake.calls[-1]
        assert kwargs["json"] == {"files": {"/index.html": index.sha1}}

    def test_creates_site_when_missing(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, []),
            ("POST", "/sites/site_9/deploys"): (200, {"id": "dep_1", "required": []}),
            ("POST", "/sites"): (201, {"id": "site_9", "name": "acme"}),
        })

        with patch(REQUEST, side_effect=fake):
            created = client.create_deployment("acme", [hash_artifact(INDEX)])

        assert ("POST", "/sites") in [(m, p) for m, p, _ in fake.calls]
        assert created.url == "https://acme.netlify.app"

    def test_site_lookup_with_unexpected_shape_raises(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, {"message": "not a list"}),
        })
        with patch(REQUEST, side_effect=fake):
            with pytest.raises(DeploymentCreateError) as excinfo:
                client.create_deployment("acme", [hash_artifact(INDEX)])

        assert "unexpected response shape" in excinfo.value.message

    def test_required_is_a_deduplicated_subset_of_the_manifest(self, client, make_response):
        index = hash_artifact(INDEX)
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [SITE]),
            ("POST", "/sites/site_1/deploys"): (200, {
                "id": "dep_1",
                "required": [index.sha1, index.sha1, "f" * 40],
            }),
        })

        with patch(REQUEST, side_effect=fake):
            created = client.create_deployment("acme", [index])

        assert created.required == [index.sha1]

    def test_rejected_manifest_raises(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [SITE]),
            ("POST", "/sites/site_1/deploys"): (422, {"message": "bad files"}),
        })
        with patch(REQUEST, side_effect=fake):
            with pytest.raises(DeploymentCreateError):
                client.create_deployment("acme", [hash_artifact(INDEX)])


class TestPublish:

    def test_creates_before_uploading_only_required_files(self, client, make_response):
        bundle = build_bundle([INDEX, ABOUT])
        about = hash_artifact(ABOUT)
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [SITE]),
            ("POST", "/sites/site_1/deploys"): (200, {"id": "dep_1", "required": [about.sha1]}),
            ("PUT", "/deploys/dep_1/files/"): (200, {}),
        })

        stages = []
        with patch(REQUEST, side_effect=fake):
            client.publish("acme", bundle, on_stage=stages.append)

        assert stages == [PipelineStage.CREATING, PipelineStage.UPLOADING]
        puts = [(path, kwargs) for method, path, kwargs in fake.calls if method == "PUT"]
        assert len(puts) == 1
        assert puts[0][0] == "/deploys/dep_1/files/about/index.html"
        assert puts[0][1]["data"] == ABOUT.content

        deploy_index = next(i for i, (m, p, _) in enumerate(fake.calls) if p == "/sites/site_1/deploys")
        put_index = next(i for i, (m, _, _) in enumerate(fake.calls) if m == "PUT")
        assert deploy_index < put_index

    def test_nothing_required_means_no_uploads(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [SITE]),
            ("POST", "/sites/site_1/deploys"): (200, {"id": "dep_1", "required": []}),
        })
        with patch(REQUEST, side_effect=fake):
            client.publish("acme", build_bundle([INDEX, ABOUT]))

        assert not [c for c in fake.calls if c[0] == "PUT"]


class TestUpload:

    def test_upload_needs_a_deploy_id(self, client):
        with pytest.raises(ValueError):
            client.upload(hash_artifact(INDEX), INDEX.content)

    def test_409_is_already_exists(self, client, make_response):
        with patch(REQUEST, return_value=make_response(409, {})):
            result = client.upload(hash_artifact(INDEX), INDEX.content, deployment_id="dep_1")
        assert result.outcome is UploadOutcome.ALREADY_EXISTS

    def test_rejection_raises(self, client, make_response):
        with patch(REQUEST, return_value=make_response(422, {"message": "bad"})):
            with pytest.raises(UploadError):
                client.upload(hash_artifact(INDEX), INDEX.content, deployment_id="dep_1")


class TestStatusAndAlias:

    @pytest.mark.parametrize("state, expected", [
        ("ready", DeploymentState.READY),
        ("error", DeploymentState.ERROR),
        ("processing", DeploymentState.BUILDING),
        ("uploading", DeploymentState.BUILDING),
    ])
    def test_state_mapping(self, client, make_response, state, expected):
        with patch(REQUEST, return_value=make_response(200, {"state": state})):
            assert client.poll_status("dep_1") is expected

    def test_status_with_non_json_body_raises_status_error(self, client, make_response):
        with patch(REQUEST, return_value=make_response(200, text="Service Unavailable")):
            with pytest.raises(DeploymentStatusError):
                client.poll_status("dep_1")

    def test_alias_prefers_the_published_ssl_url(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/deploys/dep_1"): (200, {"id": "dep_1", "site_id": "site_1"}),
            ("POST", "/sites/site_1/deploys/dep_1/restore"): (200, {"ssl_url": "https://www.acme.com"}),
        })
        with patch(REQUEST, side_effect=fake):
            assert client.assign_alias("dep_1", "acme.netlify.app") == "https://www.acme.com"

    def test_alias_looks_up_site_for_unknown_deploy(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/deploys/dep_1"): (200, {"id": "dep_1", "site_id": "site_1"}),
            ("POST", "/sites/site_1/deploys/dep_1/restore"): (200, {}),
        })
        with patch(REQUEST, side_effect=fake):
            url = client.assign_alias("dep_1", "acme.netlify.app")
        assert url == "https://acme.netlify.app"

    def test_alias_rejection_raises(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/deploys/dep_1"): (200, {"id": "dep_1", "site_id": "site_1"}),
            ("POST", "/sites/site_1/deploys/dep_1/restore"): (403, {"message": "forbidden"}),
        })
        with patch(REQUEST, side_effect=fake):
            with pytest.raises(AliasError):
                client.assign_alias("dep_1", "acme.netlify.app")


class TestDomains:

    def test_list_marks_certified_domains_verified(self, client, make_response):
        site = dict(SITE, custom_domain="acme.com", domain_aliases=["www.acme.com"])
        fake = FakeNetlify(make_response, {
            ("GET", "/sites/site_1/ssl"): (200, {"domains": ["acme.com"]}),
            ("GET", "/sites"): (200, [site]),
        })
        with patch(REQUEST, side_effect=fake):
            domains = client.list_domains("acme")

        assert [(d.name, d.verified) for d in domains] == [("acme.com", True), ("www.acme.com", False)]

    def test_add_sets_custom_domain_first(self, client, make_response):
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [SITE]),
            ("PATCH", "/sites/site_1"): (200, {"custom_domain": "acme.com"}),
        })
        with patch(REQUEST, side_effect=fake):
            client.add_domain("acme", "acme.com")

        assert fake.calls[-1][2]["json"] == {"custom_domain": "acme.com"}

    def test_add_appends_alias_when_custom_domain_taken(self, client, make_response):
        site = dict(SITE, custom_domain="acme.com")
        fake = FakeNetlify(make_response, {
            ("GET", "/sites"): (200, [site]),
            ("PATCH", "/sites/site_1"): (200, {}),
        })
        with patch(REQUEST, side_effect=fake):
            client.add_domain("acme", "www.acme.com")

        assert fake.calls[-1][2]["json"] == {"domain_aliases": ["www.acme.com"]}

    def test_remove_unknown_domain_is_404(self, client, make_response):
        fake = FakeNetlify(make_response, {("GET", "/sites"): (200, [SITE])})
        with patch(REQUEST, side_effect=fake):
            with pytest.raises(DomainError) as excinfo:
                client.remove_domain("acme", "acme.com")
        assert excinfo.value.status_code == 404

    def test_missing_site_is_404(self, client, make_response):
        fake = FakeNetlify(make_response, {("GET", "/sites"): (200, [])})
        with patch(REQUEST, side_effect=fake):
            with pytest.raises(DomainError) as excinfo:
                client.list_domains("acme")
        assert excinfo.value.status_code == 404
