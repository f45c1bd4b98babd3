"""Google Keep notes plugin.

Lists the user's notes through the Keep REST API with a bearer token,
following ``nextPageToken`` until the last page or ``max_pages``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests
from langchain_core.tools import tool
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from toolgate.ai.tools.exceptions import ToolExecutionError

if TYPE_CHECKING:
    from langchain_core.tools import BaseTool

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://keep.googleapis.com/v1"


class NoteListItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    checked: bool = False
    child_list_items: list[NoteListItem] | None = Field(default=None, alias="childListItems")


class NoteListContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    list_items: list[NoteListItem] = Field(default_factory=list, alias="listItems")


class NoteBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    list_content: NoteListContent | None = Field(default=None, alias="list")


class Note(BaseModel):
    """A Keep note as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    title: str = ""
    create_time: str = Field(default="", alias="createTime")
    update_time: str = Field(default="", alias="updateTime")
    trashed: bool = False
    body: NoteBody | None = None


class NotesPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notes: list[Note] = Field(default_factory=list)
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


class GoogleKeepPlugin:
    """Reads notes from Google Keep."""

    name = "GoogleKeep"

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        max_pages: int = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_pages = max_pages
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {token}"

    def _fetch_page(self, page_token: str | None) -> NotesPage:
        params: dict[str, Any] = {}
        if page_token:
            params["pageToken"] = page_token

        try:
            response = self.session.get(
                f"{self.base_url}/notes", params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ToolExecutionError(f"Failed to fetch notes: {e}") from e

        if not response.ok:
            raise ToolExecutionError(
                f"Failed to fetch notes: {response.status_code} {response.reason}"
            )
        try:
            return NotesPage.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ToolExecutionError(f"Keep API returned an unexpected response: {e}") from e

    def list_notes(self) -> list[Note]:
        """All notes, across pages.

        Raises:
            ToolExecutionError: On connection errors or non-success responses
        """
        notes: list[Note] = []
        page_token: str | None = None

        for page_number in range(1, self.max_pages + 1):
            page = self._fetch_page(page_token)
            notes.extend(page.notes)
            page_token = page.next_page_token
            if not page_token:
                break
            if page_number == self.max_pages:
                logger.warning(f"Stopped listing notes after {self.max_pages} pages")

        return notes

    def as_tools(self) -> list[BaseTool]:
        @tool("list_notes")
        def list_notes() -> list[Note]:
            """Lists all notes from Google Keep."""
            return self.list_notes()

        return [list_notes]
