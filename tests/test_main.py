# Test cases for main application endpoints
# Tests the banner, health, discovery, CORS and unmatched-route handling


def test_root_endpoint(client) -> None:
    """Test the root endpoint returns banner and tool catalog."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Docmost MCP is running"
    assert "list_spaces" in [tool["name"] for tool in data["tools"]]


def test_root_endpoint_read_only(read_only_client) -> None:
    names = [tool["name"] for tool in read_only_client.get("/").json()["tools"]]
    assert "create_page" not in names


def test_health_endpoint(client) -> None:
    """Test the health endpoint returns ok status."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_json_responses_allow_any_origin(client) -> None:
    for response in (client.get("/health"), client.get("/missing"), client.post("/mcp/tool-call", json={})):
        assert response.headers["access-control-allow-origin"] == "*"


def test_preflight(client) -> None:
    response = client.options("/mcp/tool-call")
    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]
    assert "Content-Type" in response.headers["access-control-allow-headers"]


def test_preflight_on_unknown_path(client) -> None:
    assert client.options("/anything/at/all").status_code == 204


def test_unknown_route(client) -> None:
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "Route not found"}


def test_post_to_get_only_route_is_not_found(client) -> None:
    assert client.post("/health").status_code == 404


def test_unsupported_method(client) -> None:
    for response in (client.delete("/health"), client.put("/somewhere")):
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}


class TestWellKnown:
    """Test cases for the self-description endpoint"""

    def test_describes_server(self, client) -> None:
        response = client.get("/.well-known/mcp")
        assert response.status_code == 200
        data = response.json()
        assert data["protocol"] == "mcp-http-1"
        assert data["serverInfo"]["name"] == "docmost-mcp"
        assert data["capabilities"] == {"tools": {"listChanged": False}}
        assert data["transport"] == {"type": "http", "endpoint": "http://testserver/mcp"}
        assert data["endpoints"] == {
            "tools": "http://testserver/mcp/tools",
            "call": "http://testserver/mcp/tool-call",
            "rpc": "http://testserver/mcp",
            "health": "http://testserver/health",
        }

    def test_forwarded_headers(self, client) -> None:
        response = client.get(
            "/mcp/.well-known",
            headers={"X-Forwarded-Proto": "https, http", "X-Forwarded-Host": "wiki-tools.example.com"},
        )
        data = response.json()
        assert data["transport"]["endpoint"] == "https://wiki-tools.example.com/mcp"
        assert data["endpoints"]["call"] == "https://wiki-tools.example.com/mcp/tool-call"
