"""Unit tests for the MCP server module.

Tests cover:
- Server configuration
- Tool functions called directly against a form service
- Tool registration and calls over the in-memory MCP client
"""

import json

import pytest

from formsmith.core.errors import FieldIndexError, FormNotFoundError

from . import tools
from .lib import (
    RESOURCE_URIS,
    TOOL_NAMES,
    ServerConfig,
    TransportType,
    get_server_capabilities,
    get_server_version,
)


def _payload(result) -> dict:
    """Decode the JSON body of a tool call result."""
    return json.loads(result.content[0].text)


# =============================================================================
# Configuration Tests
# =============================================================================


class TestServerConfig:
    """Tests for ServerConfig dataclass."""

    @pytest.mark.unit
    def test_default_config(self):
        config = ServerConfig()

        assert config.transport == TransportType.STDIO
        assert config.port == 18090
        assert config.url is None

    @pytest.mark.unit
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MCP_PORT", "19000")
        config = ServerConfig.from_env(transport="http")

        assert config.transport == TransportType.HTTP
        assert config.port == 19000
        assert config.url == "http://0.0.0.0:19000/mcp"

    @pytest.mark.unit
    def test_explicit_arguments_win(self, monkeypatch):
        monkeypatch.setenv("MCP_PORT", "19000")
        config = ServerConfig.from_env(TransportType.SSE, host="127.0.0.1", port=8001)

        assert config.url == "http://127.0.0.1:8001"

    @pytest.mark.unit
    def test_version_and_capabilities(self):
        capabilities = get_server_capabilities()

        assert get_server_version() == "0.1.0"
        assert "submit_response" in capabilities["tools"]
        assert capabilities["resources"] == ["schema://form"]
        assert capabilities["prompts"] == []


# =============================================================================
# Tool Functions
# =============================================================================


@pytest.mark.unit
class TestTools:
    """Tool functions against a temporary FormService."""

    def test_create_and_add_fields(self, form_service, owner):
        created = tools.create_form(form_service, owner, "Contact")
        added = tools.add_field(form_service, owner, created["id"], "tel")

        assert added["type"] == "phone"
        schema = form_service.get_schema(created["id"])
        assert schema.field_ids == [added["id"]]

    def test_edit_and_reorder(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)

        edited = tools.edit_field(
            form_service, owner, stored.id, "name", {"placeholder": "Your name"}
        )
        moved = tools.reorder_field(form_service, owner, stored.id, 2, 0)

        assert edited["placeholder"] == "Your name"
        assert moved["field_ids"] == ["topic", "name", "email"]
        with pytest.raises(FieldIndexError):
            tools.reorder_field(form_service, owner, stored.id, 0, 9)

    def test_get_form_reports_issues(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        result = tools.get_form(form_service, stored.id)
        assert result["title"] == "Contact"
        assert result["issues"] == []

    def test_render_fill_mode(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        result = tools.render_form(form_service, stored.id, "fill", {"name": "Ann"})

        widgets = {w["field_id"]: w for w in result["presentation"]["widgets"]}
        assert widgets["name"]["value"] == "Ann"
        assert widgets["email"]["error"] == "Email is required"
        assert result["text"].startswith("Contact [fill]")

    @pytest.mark.asyncio
    async def test_submit_response(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)

        rejected = await tools.submit_response(form_service, stored.id, {"name": "Ann"})
        accepted = await tools.submit_response(
            form_service,
            stored.id,
            {"name": "Ann", "email": "ann@example.com"},
            {"userId": "42"},
        )

        assert rejected["submitted"] is False
        assert rejected["errors"] == {"email": "Email is required"}
        assert accepted["submitted"] is True
        listed = tools.list_submissions(form_service, owner, stored.id)
        assert listed["total"] == 1
        assert listed["submissions"][0]["metadata"]["userId"] == "42"

    @pytest.mark.asyncio
    async def test_submit_response_keeps_metadata(self, form_service, owner, contact_form):
        stored = form_service.create_form(owner, contact_form)
        metadata = {"id": "embed-42", "tags": ["a", "b"], "userId": "u9"}

        await tools.submit_response(
            form_service,
            stored.id,
            {"name": "Ann", "email": "ann@example.com"},
            metadata,
        )

        saved = form_service.list_submissions(owner, stored.id)[0].metadata
        assert {key: saved[key] for key in metadata} == metadata
        assert "submitted_at" in saved

    def test_missing_form(self, form_service):
        with pytest.raises(FormNotFoundError):
            tools.validate_answers(form_service, "nope", {})


# =============================================================================
# MCP Protocol Integration Tests
# =============================================================================


@pytest.mark.mcp
class TestMCPProtocol:
    """Integration tests over the in-memory MCP client."""

    @pytest.mark.asyncio
    async def test_registered_surface_matches_capabilities(self, mcp_client):
        tool_names = {t.name for t in await mcp_client.list_tools()}
        resource_uris = {str(r.uri).rstrip("/") for r in await mcp_client.list_resources()}

        assert tool_names == set(TOOL_NAMES)
        assert resource_uris == set(RESOURCE_URIS)

    @pytest.mark.asyncio
    async def test_build_and_submit(self, mcp_client):
        created = _payload(
            await mcp_client.call_tool("create_form", {"title": "Signup"})
        )
        field = _payload(
            await mcp_client.call_tool(
                "add_field", {"form_id": created["id"], "kind": "email"}
            )
        )
        await mcp_client.call_tool(
            "update_field",
            {
                "form_id": created["id"],
                "field_id": field["id"],
                "updates": {"label": "Work email", "required": True},
            },
        )

        invalid = _payload(
            await mcp_client.call_tool(
                "validate_answers", {"form_id": created["id"], "answers": {}}
            )
        )
        submitted = _payload(
            await mcp_client.call_tool(
                "submit_response",
                {"form_id": created["id"], "answers": {field["id"]: "a@x.io"}},
            )
        )

        assert invalid == {
            "valid": False,
            "errors": {field["id"]: "Work email is required"},
        }
        assert submitted["submitted"] is True

    @pytest.mark.asyncio
    async def test_unknown_form_is_tool_error(self, mcp_client):
        with pytest.raises(Exception, match="not found"):
            await mcp_client.call_tool("get_form", {"form_id": "nonexistent"})

    @pytest.mark.asyncio
    async def test_schema_resource(self, mcp_client):
        contents = await mcp_client.read_resource("schema://form")
        schema = json.loads(contents[0].text)
        assert "FieldSchema" in schema["$defs"]
