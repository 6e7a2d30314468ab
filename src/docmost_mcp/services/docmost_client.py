"""Async client for the Docmost REST API.

Every JSON-returning call goes through ``normalize_response`` so that the
``{"data": ...}`` envelope, HTML error pages and non-2xx statuses are handled
in one place.
"""

import base64
import binascii
import json
import logging
import mimetypes
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote, urlparse

import httpx

from .errors import AuthError, BackendError, ResolutionError, ValidationError

logger = logging.getLogger(__name__)

PAGE_SIZE = 50
AUTH_COOKIE_NAME = "authToken"
DEFAULT_UPLOAD_NAME = "upload.bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Splits a folded Set-Cookie header ("a=1; Path=/, b=2") without breaking Expires dates
_COOKIE_SPLIT = re.compile(r",\s*(?=[^;,\s]+=)")


def _decode_body(response: httpx.Response, strict: bool = False) -> Any:
    """Decode JSON bodies, keep anything else as text.

    With ``strict`` a body labelled JSON that fails to decode raises
    ``BackendError``; otherwise the raw text is returned for error messages.
    """
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            if strict:
                message = f"Docmost returned invalid JSON ({response.status_code}): {e}"
                logger.warning(message)
                raise BackendError(message, status_code=response.status_code) from e
            return response.text
    return response.text


def _body_as_message(body: Any) -> str:
    return body if isinstance(body, str) else json.dumps(body, ensure_ascii=False)


def normalize_response(response: httpx.Response, action: str = "") -> Any:
    """Turn a Docmost response into a plain value or raise ``BackendError``.

    Args:
        response: Response returned by the API
        action: Optional context appended to error messages ("while uploading")

    Returns:
        The ``data`` field when the decoded body is an object carrying one,
        otherwise the decoded body verbatim

    Raises:
        BackendError: On non-2xx status, on a JSON body that does not decode,
            or when the body is an HTML page
    """
    content_type = response.headers.get("content-type", "")
    suffix = f" {action}" if action else ""

    if not response.is_success:
        message = f"Docmost returned {response.status_code}{suffix}: {_body_as_message(_decode_body(response))}"
        logger.warning(message)
        raise BackendError(message, status_code=response.status_code)

    body = _decode_body(response, strict=True)

    if "text/html" in content_type or (isinstance(body, str) and "<!doctype html" in body.lower()):
        raise BackendError(
            "Docmost returned HTML instead of JSON. Check that the API base URL is correct.",
            status_code=response.status_code,
        )

    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def extract_parent_id(page: Any) -> Optional[str]:
    """First non-empty parent reference of a page object."""
    if not isinstance(page, dict):
        return None
    parent_page = page.get("parentPage") or {}
    return page.get("parentPageId") or parent_page.get("id") or page.get("parentId") or None


def extract_space_id(page: Any) -> Optional[str]:
    if not isinstance(page, dict):
        return None
    space = page.get("space") or {}
    return page.get("spaceId") or space.get("id") or space.get("spaceId") or None


def _is_absolute_http_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _extract_cookie_token(raw_cookies: Any) -> str:
    if isinstance(raw_cookies, str):
        raw_cookies = [raw_cookies]
    cookies: List[str] = []
    for value in raw_cookies or []:
        cookies.extend(_COOKIE_SPLIT.split(value))

    prefix = f"{AUTH_COOKIE_NAME}="
    auth_cookie = next((c.strip() for c in cookies if c.strip().startswith(prefix)), None)
    if auth_cookie is None:
        raise AuthError(f"Docmost did not return the {AUTH_COOKIE_NAME} cookie.")

    token = auth_cookie.split(";", 1)[0][len(prefix):]
    if not token:
        raise AuthError(f"Could not extract the {AUTH_COOKIE_NAME} value.")
    return token


class DocmostClient:
    """Typed operations against a Docmost instance."""

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.auth_cookie: Optional[str] = None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(None),
            headers={"User-Agent": "docmost-mcp/0.1.0"},
        )

    async def __aenter__(self) -> "DocmostClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def build_auth_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Bearer token wins; the login cookie is only used without one."""
        headers = dict(extra or {})
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        elif self.auth_cookie:
            headers["Cookie"] = f"{AUTH_COOKIE_NAME}={self.auth_cookie}"
        return headers

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug(f"{method} {path}")
        try:
            return await self._client.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Request to Docmost failed: {method} {path}: {e}")
            raise BackendError(f"Could not reach Docmost at {self.base_url}: {e}") from e

    async def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._send("POST", path, json=body or {}, headers=self.build_auth_headers())
        return normalize_response(response)

    # Spaces and pages

    async def list_spaces(self) -> Any:
        return await self.post("/api/spaces", {"page": 1, "limit": PAGE_SIZE})

    async def list_pages(self, space_id: Optional[str]) -> Dict[str, Any]:
        """List every page of a space, following pagination until exhausted.

        Pages are requested one after the other; each request depends on the
        previous page's ``meta.hasNextPage``.
        """
        if not space_id:
            raise ValidationError("spaceId is required to list pages.")

        items: List[Any] = []
        page = 1
        last_meta: Optional[Dict[str, Any]] = None
        has_next = True

        while has_next:
            result = await self.post(
                "/api/pages/sidebar-pages",
                {"spaceId": space_id, "page": page, "limit": PAGE_SIZE},
            )
            if isinstance(result, dict):
                items.extend(result.get("items") or [])
                last_meta = result.get("meta")
            elif isinstance(result, list):
                items.extend(result)
                last_meta = None
            else:
                last_meta = None
            has_next = bool(isinstance(last_meta, dict) and last_meta.get("hasNextPage"))
            page += 1

        logger.debug(f"Listed {len(items)} pages of space {space_id} in {page - 1} request(s)")
        return {"items": items, "meta": last_meta}

    async def get_page(self, page_id: Optional[str]) -> Any:
        if not page_id:
            raise ValidationError("pageId is required to get a page.")
        return await self.post("/api/pages/info", {"pageId": page_id})

    async def search_pages(self, query: Optional[str]) -> Any:
        if not query:
            raise ValidationError("query is required to search.")
        return await self.post("/api/search", {"query": query})

    async def create_page(
        self,
        title: Optional[str],
        content: Optional[str],
        space_id: Optional[str],
        folder_id: Optional[str] = None,
    ) -> Any:
        if not title or not content or not space_id:
            raise ValidationError("title, content and spaceId are required to create a page.")
        # parentPageId is always sent; null means top-level page
        return await self.post(
            "/api/pages/create",
            {"title": title, "content": content, "spaceId": space_id, "parentPageId": folder_id or None},
        )

    async def update_page(self, page_id: Optional[str], payload: Optional[Dict[str, Any]] = None) -> Any:
        if not page_id:
            raise ValidationError("pageId is required to update a page.")
        return await self.post("/api/pages/update", {"pageId": page_id, **(payload or {})})

    async def get_parent_page(self, page_id: Optional[str]) -> Dict[str, Any]:
        page = await self.get_page(page_id)
        parent_id = extract_parent_id(page)
        if not parent_id:
            return {"parentId": None, "parent": None}
        parent = await self.get_page(parent_id)
        return {"parentId": parent_id, "parent": parent}

    async def list_children(self, page_id: Optional[str]) -> Dict[str, Any]:
        page = await self.get_page(page_id)
        space_id = extract_space_id(page)
        if not space_id:
            raise ResolutionError(f"Could not determine the space of page {page_id} to look up its children.")
        pages = await self.list_pages(space_id)
        children = [item for item in pages["items"] if extract_parent_id(item) == page_id]
        return {"parentPageId": page_id, "items": children}

    # Files

    async def download_file(self, file_id: Optional[str]) -> Dict[str, Any]:
        """Download an attachment and base64-encode it for JSON transport."""
        if not file_id:
            raise ValidationError("fileId is required to download a file.")

        response = await self._send(
            "GET", f"/api/files/{quote(str(file_id), safe='')}", headers=self.build_auth_headers()
        )
        if not response.is_success:
            message = f"Docmost returned {response.status_code} while downloading: {response.text}"
            logger.warning(message)
            raise BackendError(message, status_code=response.status_code)

        content = response.content
        return {
            "fileId": file_id,
            "contentType": response.headers.get("content-type", DEFAULT_CONTENT_TYPE),
            "size": len(content),
            "base64Content": base64.b64encode(content).decode("ascii"),
        }

    async def _fetch_source(self, source_url: str) -> httpx.Response:
        # Fetched without Docmost credentials
        try:
            response = await self._client.get(source_url)
        except httpx.HTTPError as e:
            raise BackendError(f"Could not fetch the remote file {source_url}: {e}") from e
        if not response.is_success:
            raise BackendError(
                f"Could not fetch the remote file: {response.status_code} {response.text}",
                status_code=response.status_code,
            )
        return response

    async def upload_file(
        self,
        page_id: Optional[str],
        file_name: Optional[str] = None,
        file_content: Optional[str] = None,
        file_source_url: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> Any:
        """Attach a file to a page.

        Args:
            page_id: Page receiving the attachment
            file_name: Name to store; derived from the source URL when omitted
            file_content: Base64-encoded file bytes
            file_source_url: URL to fetch the bytes from instead
            content_type: Explicit MIME type for base64 content

        Raises:
            ValidationError: If pageId is missing or not exactly one byte source is given
            BackendError: If the source URL or Docmost fails
        """
        if not page_id:
            raise ValidationError("pageId is required to upload a file.")
        if not file_content and not file_source_url:
            raise ValidationError("Provide fileContent (base64) or fileSourceUrl to upload a file.")
        if file_content and file_source_url:
            raise ValidationError("Provide either fileContent or fileSourceUrl, not both.")

        name = file_name or DEFAULT_UPLOAD_NAME
        if file_source_url:
            if not _is_absolute_http_url(file_source_url):
                raise ValidationError("fileSourceUrl must be an absolute http:// or https:// URL.")
            source = await self._fetch_source(file_source_url)
            data = source.content
            mime = source.headers.get("content-type") or DEFAULT_CONTENT_TYPE
            if not file_name:
                name = unquote(urlparse(file_source_url).path.rsplit("/", 1)[-1]) or DEFAULT_UPLOAD_NAME
        else:
            if not isinstance(file_content, str):
                raise ValidationError("fileContent must be a base64-encoded string.")
            try:
                # Line-wrapped base64 is accepted; the alphabet is still checked
                data = base64.b64decode("".join(file_content.split()), validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError(f"fileContent is not valid base64: {e}") from e
            mime = content_type or mimetypes.guess_type(name)[0] or DEFAULT_CONTENT_TYPE

        logger.info(f"Uploading {name} ({len(data)} bytes, {mime}) to page {page_id}")
        response = await self._send(
            "POST",
            "/api/files/upload",
            data={"pageId": page_id},
            files={"file": (name, data, mime)},
            headers=self.build_auth_headers(),
        )
        return normalize_response(response, "while uploading the file")

    # Authentication

    async def login(self, email: Optional[str], password: Optional[str]) -> str:
        """Exchange credentials for a session cookie used on later calls.

        Returns:
            The ``authToken`` cookie value

        Raises:
            ValidationError: If email or password is missing
            BackendError: On a non-success login response
            AuthError: If the response carries no usable authToken cookie
        """
        if not email or not password:
            raise ValidationError("email and password are required to log in.")

        response = await self._send("POST", "/api/auth/login", json={"email": email, "password": password})
        if not response.is_success:
            message = f"Docmost returned {response.status_code} while logging in: {_body_as_message(_decode_body(response))}"
            logger.warning(message)
            raise BackendError(message, status_code=response.status_code)

        token = _extract_cookie_token(response.headers.get_list("set-cookie"))
        self.auth_cookie = token
        logger.info("Logged in to Docmost with session cookie")
        return token
