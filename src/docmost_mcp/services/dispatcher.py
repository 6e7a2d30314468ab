"""Dispatcher routing tool invocations to the Docmost client"""

import logging
import re
import unicodedata
from typing import Any, Awaitable, Callable, Dict, Optional

from .docmost_client import DocmostClient
from .errors import PolicyError, ResolutionError, UnknownToolError, ValidationError
from .tool_registry import ToolRegistry

logger = logging.getLogger(__name__)

_NAMESPACE_SEPARATOR = re.compile(r"[:/.]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

Handler = Callable[[Dict[str, Any]], Awaitable[Any]]


def resolve_tool_name(name: str) -> str:
    """Drop a namespace suffix: ``get_page:docmost`` and ``get_page/x`` both become ``get_page``."""
    return _NAMESPACE_SEPARATOR.split(name, maxsplit=1)[0].strip()


def slugify(title: Optional[str]) -> str:
    """URL-safe slug of a title; empty string when nothing usable remains."""
    if not title:
        return ""
    decomposed = unicodedata.normalize("NFKD", title)
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", ascii_text.lower()).strip("-")


class ToolDispatcher:
    """Resolves tool names, applies the read-only policy and calls the client."""

    def __init__(
        self,
        client: DocmostClient,
        registry: Optional[ToolRegistry] = None,
        read_only: bool = False,
        public_url: Optional[str] = None,
    ):
        self.client = client
        self.registry = registry or ToolRegistry()
        self.read_only = read_only
        self.public_url = (public_url or client.base_url).rstrip("/")
        self._handlers: Dict[str, Handler] = {
            "list_spaces": self._list_spaces,
            "list_pages": self._list_pages,
            "get_page": self._get_page,
            "search_pages": self._search_pages,
            "create_page": self._create_page,
            "update_page": self._update_page,
            "get_parent_page": self._get_parent_page,
            "list_children": self._list_children,
            "get_page_url": self._get_page_url,
            "download_file": self._download_file,
            "upload_file": self._upload_file,
        }
        self._check_dispatch_table()

    def _check_dispatch_table(self) -> None:
        registered = set(self.registry.names())
        handled = set(self._handlers)
        if registered != handled:
            raise RuntimeError(
                "Dispatch table does not match the tool registry: "
                f"unhandled={sorted(registered - handled)}, unregistered={sorted(handled - registered)}"
            )

    def visible_tools(self) -> ToolRegistry:
        """Tools callers may see under the current policy."""
        return self.registry.read_only_view() if self.read_only else self.registry

    async def invoke(self, tool: Optional[str], params: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a tool by name.

        Args:
            tool: Tool name, optionally namespaced ("get_page:docmost")
            params: Parameter bag; unknown keys are ignored

        Returns:
            Backend result, passed through

        Raises:
            ValidationError: If the tool name or parameter bag is malformed
            UnknownToolError: If the name does not resolve to a registered tool
            PolicyError: If a mutating tool is called in read-only mode
        """
        if not tool or not isinstance(tool, str):
            raise ValidationError('The "tool" field is required.')
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ValidationError("Tool parameters must be an object.")

        name = resolve_tool_name(tool)
        definition = self.registry.get(name)
        if definition is None:
            raise UnknownToolError(tool)
        if self.read_only and definition.mutating:
            raise PolicyError(f"Tool {name} is disabled: the server is running in read-only mode.")

        logger.info(f"Invoking tool {name}")
        return await self._handlers[name](params)

    async def _list_spaces(self, params: Dict[str, Any]) -> Any:
        return await self.client.list_spaces()

    async def _list_pages(self, params: Dict[str, Any]) -> Any:
        return await self.client.list_pages(params.get("spaceId"))

    async def _get_page(self, params: Dict[str, Any]) -> Any:
        return await self.client.get_page(params.get("pageId"))

    async def _search_pages(self, params: Dict[str, Any]) -> Any:
        return await self.client.search_pages(params.get("query"))

    async def _create_page(self, params: Dict[str, Any]) -> Any:
        return await self.client.create_page(
            title=params.get("title"),
            content=params.get("content"),
            space_id=params.get("spaceId"),
            folder_id=params.get("folderId"),
        )

    async def _update_page(self, params: Dict[str, Any]) -> Any:
        payload = params.get("payload") or {}
        if not isinstance(payload, dict):
            raise ValidationError("payload must be an object.")
        payload = {**payload, **{key: params[key] for key in ("title", "content") if key in params}}
        return await self.client.update_page(params.get("pageId"), payload)

    async def _get_parent_page(self, params: Dict[str, Any]) -> Any:
        return await self.client.get_parent_page(params.get("pageId"))

    async def _list_children(self, params: Dict[str, Any]) -> Any:
        return await self.client.list_children(params.get("pageId"))

    async def _get_page_url(self, params: Dict[str, Any]) -> Dict[str, Any]:
        page_id = params.get("pageId")
        if not page_id:
            raise ValidationError("pageId is required to build a page URL.")

        page = await self.client.get_page(page_id)
        if not isinstance(page, dict):
            raise ResolutionError(f"Docmost returned no page object for {page_id}.")
        space = page.get("space") or {}
        slug_id = page.get("slugId")
        space_slug = space.get("slug") or page.get("spaceSlug")
        if not slug_id or not space_slug:
            raise ResolutionError(f"Could not determine slugId and space slug for page {page_id}.")

        title_slug = slugify(page.get("title"))
        page_slug = f"{title_slug}-{slug_id}" if title_slug else slug_id
        return {
            "url": f"{self.public_url}/s/{space_slug}/p/{page_slug}",
            "pageId": page_id,
            "slugId": slug_id,
            "spaceSlug": space_slug,
            "pageSlug": page_slug,
        }

    async def _download_file(self, params: Dict[str, Any]) -> Any:
        return await self.client.download_file(params.get("fileId"))

    async def _upload_file(self, params: Dict[str, Any]) -> Any:
        return await self.client.upload_file(
            page_id=params.get("pageId"),
            file_name=params.get("fileName"),
            file_content=params.get("fileContent"),
            file_source_url=params.get("fileSourceUrl"),
            content_type=params.get("contentType"),
        )
