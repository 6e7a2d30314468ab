# Tool registry
# Static catalog of Docmost tools and filtered views over it

from typing import Iterable, Iterator, Sequence

from ..models.tool import MCPTool, ToolDefinition, ToolParameter


def _param(type_: str = "string", required: bool = False, description: str = "", nullable: bool = False) -> ToolParameter:
    return ToolParameter(type=type_, required=required, description=description, nullable=nullable)


DEFAULT_TOOLS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="list_spaces",
        description="List the spaces available in Docmost.",
    ),
    ToolDefinition(
        name="list_pages",
        description="List every page inside a space, following pagination. Requires spaceId.",
        params={"spaceId": _param(required=True, description="Space identifier")},
    ),
    ToolDefinition(
        name="get_page",
        description="Get a page by its id.",
        params={"pageId": _param(required=True, description="Page identifier")},
    ),
    ToolDefinition(
        name="search_pages",
        description="Full-text search across pages.",
        params={"query": _param(required=True, description="Free text to search for")},
    ),
    ToolDefinition(
        name="create_page",
        description="Create a new page. Requires title, content and spaceId.",
        params={
            "title": _param(required=True, description="Page title"),
            "content": _param(required=True, description="Page content"),
            "spaceId": _param(required=True, description="Space that will own the page"),
            "folderId": _param(nullable=True, description="Parent page id; omit for a top-level page"),
        },
        mutating=True,
    ),
    ToolDefinition(
        name="update_page",
        description="Update an existing page. Requires pageId and the fields to change.",
        params={
            "pageId": _param(required=True, description="Page identifier"),
            "payload": _param("object", description="Fields to send to Docmost as-is"),
            "title": _param(description="New title, merged into payload"),
            "content": _param(description="New content, merged into payload"),
        },
        mutating=True,
    ),
    ToolDefinition(
        name="get_parent_page",
        description="Get the parent of a page. Returns null parentId and parent for top-level pages.",
        params={"pageId": _param(required=True, description="Page identifier")},
    ),
    ToolDefinition(
        name="list_children",
        description="List the direct children of a page.",
        params={"pageId": _param(required=True, description="Page identifier")},
    ),
    ToolDefinition(
        name="get_page_url",
        description="Build the browser URL of a page from its slug and its space slug.",
        params={"pageId": _param(required=True, description="Page identifier")},
    ),
    ToolDefinition(
        name="download_file",
        description="Download an attachment. The content is returned base64-encoded.",
        params={"fileId": _param(required=True, description="Attachment identifier")},
    ),
    ToolDefinition(
        name="upload_file",
        description=(
            "Attach a file to a page from base64 content (fileContent) or from a URL "
            "(fileSourceUrl). Exactly one of the two is required."
        ),
        params={
            "pageId": _param(required=True, description="Page receiving the attachment"),
            "fileName": _param(description="File name; derived from fileSourceUrl when omitted"),
            "fileContent": _param(description="Base64-encoded file content"),
            "fileSourceUrl": _param(description="URL to download the file from"),
            "contentType": _param(description="MIME type of fileContent"),
        },
        mutating=True,
    ),
)


class ToolRegistry:
    """Ordered, immutable collection of tool definitions.

    Filtering returns a new registry; the instance it was derived from is
    left untouched.
    """

    def __init__(self, tools: Sequence[ToolDefinition] = DEFAULT_TOOLS) -> None:
        names = [tool.name for tool in tools]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"Duplicate tool names: {sorted(duplicates)}")
        self._tools: tuple[ToolDefinition, ...] = tuple(tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return any(tool.name == name for tool in self._tools)

    def names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def get(self, name: str) -> ToolDefinition | None:
        return next((tool for tool in self._tools if tool.name == name), None)

    def mutating_names(self) -> set[str]:
        return {tool.name for tool in self._tools if tool.mutating}

    def without(self, names: Iterable[str]) -> "ToolRegistry":
        """Registry view excluding the given tool names."""
        excluded = set(names)
        return ToolRegistry([tool for tool in self._tools if tool.name not in excluded])

    def read_only_view(self) -> "ToolRegistry":
        return self.without(self.mutating_names())

    def catalog(self) -> list[dict]:
        return [tool.to_catalog_entry() for tool in self._tools]

    def to_mcp(self) -> list[MCPTool]:
        return [tool.to_mcp() for tool in self._tools]
