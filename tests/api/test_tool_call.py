"""Tests for the direct tool-call envelope"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docmost_mcp.api.tool_call import router
from docmost_mcp.services.errors import BackendError, ResolutionError, ValidationError


class TestToolCatalog:
    """Test cases for GET /mcp/tools"""

    def test_lists_all_tools(self, client):
        response = client.get("/mcp/tools")

        assert response.status_code == 200
        names = [tool["name"] for tool in response.json()["tools"]]
        assert "create_page" in names
        assert "get_page_url" in names

    def test_read_only_hides_mutating_tools(self, read_only_client):
        response = read_only_client.get("/mcp/tools")

        names = [tool["name"] for tool in response.json()["tools"]]
        assert "create_page" not in names
        assert "update_page" not in names
        assert "list_pages" in names

    def test_catalog_entry_shape(self, client):
        tool = next(t for t in client.get("/mcp/tools").json()["tools"] if t["name"] == "list_pages")

        assert tool["params"]["spaceId"]["type"] == "string"
        assert tool["params"]["spaceId"]["required"] is True


class TestToolCall:
    """Test cases for POST /mcp/tool-call"""

    def test_success(self, client, mock_client):
        mock_client.get_page.return_value = {"id": "p1", "title": "x"}

        response = client.post("/mcp/tool-call", json={"tool": "get_page", "params": {"pageId": "p1"}})

        assert response.status_code == 200
        assert response.json() == {"result": {"id": "p1", "title": "x"}}
        mock_client.get_page.assert_awaited_once_with("p1")

    def test_params_optional(self, client, mock_client):
        mock_client.list_spaces.return_value = []

        response = client.post("/mcp/tool-call", json={"tool": "list_spaces"})

        assert response.status_code == 200
        assert response.json() == {"result": []}

    def test_namespaced_tool(self, client, mock_client):
        mock_client.list_spaces.return_value = [{"id": "s1"}]

        response = client.post("/mcp/tool-call", json={"tool": "list_spaces:docmost", "params": {}})

        assert response.json() == {"result": [{"id": "s1"}]}

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("pageId is required to get a page."),
            BackendError("Docmost returned 403: nope", status_code=403),
            ResolutionError("no space"),
            RuntimeError("boom"),
        ],
    )
    def test_every_failure_is_a_400_with_message(self, client, mock_client, error):
        mock_client.get_page.side_effect = error

        response = client.post("/mcp/tool-call", json={"tool": "get_page", "params": {"pageId": "p1"}})

        assert response.status_code == 400
        assert response.json() == {"error": str(error)}

    def test_unknown_tool(self, client):
        response = client.post("/mcp/tool-call", json={"tool": "drop_tables", "params": {}})

        assert response.status_code == 400
        assert response.json() == {"error": "Unknown tool: drop_tables"}

    def test_missing_tool_field(self, client):
        response = client.post("/mcp/tool-call", json={"params": {}})

        assert response.status_code == 400
        assert "tool" in response.json()["error"]

    def test_invalid_json(self, client):
        response = client.post(
            "/mcp/tool-call", content=b"{not json", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Request body must be valid JSON."}

    def test_body_must_be_object(self, client):
        response = client.post("/mcp/tool-call", json=["get_page"])

        assert response.status_code == 400

    def test_read_only_policy(self, read_only_client, mock_client):
        response = read_only_client.post(
            "/mcp/tool-call",
            json={"tool": "create_page", "params": {"title": "t", "content": "c", "spaceId": "s1"}},
        )

        assert response.status_code == 400
        assert "read-only" in response.json()["error"]
        mock_client.create_page.assert_not_called()

    def test_oversized_body_rejected(self, make_app, mock_client):
        app = make_app(max_body_bytes=64)

        with TestClient(app) as client:
            response = client.post(
                "/mcp/tool-call", json={"tool": "search_pages", "params": {"query": "x" * 200}}
            )

        assert response.status_code == 400
        assert response.json() == {"error": "Request body is too large."}
        mock_client.search_pages.assert_not_called()


def test_dispatcher_not_initialized():
    """Router mounted without a dispatcher in app state"""
    app = FastAPI()
    app.include_router(router)

    with TestClient(app) as client:
        response = client.get("/mcp/tools")

    assert response.status_code == 500
    assert "not initialized" in response.json()["detail"]
