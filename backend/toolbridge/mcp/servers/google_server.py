"""Google Workspace-backed MCP server (Gmail, Drive, Calendar, Sheets, Docs).

Requests authenticate with a service account using domain-wide delegation:
the account impersonates one user, and every call acts as that user.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Any, Callable, Mapping

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from pydantic import SecretStr

from ..adapters import render_path
from ..api_client import ApiClient, AuthenticatedApiClient, BackendProfile
from ..catalogue import CatalogueEntry, array, number, obj, rest, string, tool
from ..errors import TransportFault
from ..schema import ToolCallResult
from ..server import MCPServer

logger = logging.getLogger(__name__)

SERVER_ID = "google"
DEFAULT_BASE_URL = "https://www.googleapis.com"

SCOPES = (
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/drive",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/documents",
)

GMAIL = "https://gmail.googleapis.com/gmail/v1/users/me"
DRIVE = "https://www.googleapis.com/drive/v3"
CALENDAR = "https://www.googleapis.com/calendar/v3/calendars"
SHEETS = "https://sheets.googleapis.com/v4/spreadsheets"
DOCS = "https://docs.googleapis.com/v1/documents"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def google_profile(base_url: str = DEFAULT_BASE_URL) -> BackendProfile:
    return BackendProfile(service="Google", base_url=base_url)


def load_service_account(
    key: SecretStr | str, *, subject: str | None = None
) -> service_account.Credentials:
    """Build delegated credentials from a key file path or the key's inline JSON."""

    raw = key.get_secret_value() if isinstance(key, SecretStr) else key
    if raw.lstrip().startswith("{"):
        credentials = service_account.Credentials.from_service_account_info(
            json.loads(raw), scopes=list(SCOPES)
        )
    else:
        credentials = service_account.Credentials.from_service_account_file(raw, scopes=list(SCOPES))
    if subject and subject != "me":
        credentials = credentials.with_subject(subject)
    return credentials


class ServiceAccountTokenSource:
    """Hands out the current access token, refreshing it once it expires."""

    def __init__(self, credentials: Any, *, request_factory: Callable[[], Any] = Request):
        self._credentials = credentials
        self._request_factory = request_factory
        self._lock = asyncio.Lock()

    async def current(self) -> SecretStr:
        async with self._lock:
            if not self._credentials.valid:
                logger.info("refreshing Google access token")
                try:
                    await asyncio.to_thread(self._credentials.refresh, self._request_factory())
                except GoogleAuthError as exc:
                    raise TransportFault("Google", f"token refresh failed: {exc}") from exc
            return SecretStr(self._credentials.token)


def encode_message(to: str, subject: str, body: str) -> str:
    """RFC 2822 message as the unpadded base64url string Gmail expects in ``raw``."""

    message = EmailMessage()
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")


def _created(noun: str, payload: Any, key: str = "id") -> ToolCallResult:
    identifier = payload.get(key) if isinstance(payload, Mapping) else None
    return ToolCallResult.text(f"{noun} created. ID: {identifier}")


async def send_message(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    raw = encode_message(arguments["to"], arguments["subject"], arguments["body"])
    payload = await client.post(f"{GMAIL}/messages/send", {"raw": raw})
    identifier = payload.get("id") if isinstance(payload, Mapping) else None
    return ToolCallResult.text(f"Message sent. ID: {identifier}")


async def create_draft(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    raw = encode_message(arguments["to"], arguments["subject"], arguments["body"])
    payload = await client.post(f"{GMAIL}/drafts", {"message": {"raw": raw}})
    return _created("Draft", payload)


async def create_folder(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    metadata: dict[str, Any] = {"name": arguments["name"], "mimeType": FOLDER_MIME_TYPE}
    if arguments.get("parentId"):
        metadata["parents"] = [arguments["parentId"]]
    payload = await client.post(f"{DRIVE}/files", metadata)
    return _created("Folder", payload)


def _event_times(value: str) -> dict[str, str]:
    # All-day events carry a bare date; timed events an RFC 3339 timestamp.
    return {"date": value} if len(value) == 10 else {"dateTime": value}


async def create_event(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    event: dict[str, Any] = {
        "summary": arguments["summary"],
        "start": _event_times(arguments["start"]),
        "end": _event_times(arguments["end"]),
    }
    for name in ("description", "location"):
        if arguments.get(name):
            event[name] = arguments[name]
    if arguments.get("attendees"):
        event["attendees"] = [{"email": email} for email in arguments["attendees"]]
    calendar_id = arguments.get("calendarId") or "primary"
    path = render_path(CALENDAR + "/{calendarId}/events", {"calendarId": calendar_id})
    payload = await client.post(path, event)
    return _created("Event", payload)


async def update_event(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    path = render_path(
        CALENDAR + "/{calendarId}/events/{eventId}",
        {"calendarId": arguments.get("calendarId") or "primary", "eventId": arguments["eventId"]},
    )
    await client.patch(path, dict(arguments["updates"]))
    return ToolCallResult.text("Event updated")


async def create_spreadsheet(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    payload = await client.post(SHEETS, {"properties": {"title": arguments["title"]}})
    return _created("Spreadsheet", payload, key="spreadsheetId")


async def create_document(arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
    payload = await client.post(DOCS, {"title": arguments["title"]})
    return _created("Document", payload, key="documentId")


@dataclass(frozen=True)
class BatchEdit:
    """A single structured edit sent through a Sheets or Docs ``batchUpdate``."""

    path: str
    build: Callable[[Mapping[str, Any]], dict[str, Any]]
    message: str

    async def __call__(self, arguments: Mapping[str, Any], client: ApiClient) -> ToolCallResult:
        await client.post(render_path(self.path, arguments), {"requests": [self.build(arguments)]})
        return ToolCallResult.text(self.message)


SPREADSHEET_BATCH = SHEETS + "/{spreadsheetId}:batchUpdate"
DOCUMENT_BATCH = DOCS + "/{documentId}:batchUpdate"

MESSAGE = {"messageId": string("Gmail message id")}
FILE = {"fileId": string("Drive file id")}
CALENDAR_ID = {"calendarId": string("Calendar id (default: primary)")}
EVENT = {"eventId": string("Event id")}
SPREADSHEET = {"spreadsheetId": string("Spreadsheet id")}
RANGE = {"range": string("A1 notation range, e.g. Sheet1!A1:C10")}
VALUES = {"values": array("Rows of cell values", items={"type": "array"})}
DOCUMENT = {"documentId": string("Document id")}
MESSAGE_FIELDS = {
    "to": string("Recipient address"),
    "subject": string(),
    "body": string("Plain-text body"),
}


CATALOGUE: list[CatalogueEntry] = [
    # gmail
    tool(
        "gmail_send_message",
        "Send email via Gmail",
        send_message,
        properties=MESSAGE_FIELDS,
        required=["to", "subject", "body"],
    ),
    rest(
        "gmail_list_messages",
        "List Gmail messages",
        "GET",
        GMAIL + "/messages",
        properties={
            "maxResults": number("Maximum number of messages"),
            "query": string("Gmail search query, e.g. from:alice is:unread"),
            "pageToken": string(),
        },
        query=("maxResults", "query", "pageToken"),
        renames={"query": "q"},
    ),
    rest("gmail_get_message", "Get a Gmail message", "GET", GMAIL + "/messages/{messageId}", properties=MESSAGE),
    rest(
        "gmail_delete_message",
        "Delete a Gmail message",
        "DELETE",
        GMAIL + "/messages/{messageId}",
        properties=MESSAGE,
        message="Message deleted",
    ),
    rest(
        "gmail_trash_message",
        "Move a Gmail message to the trash",
        "POST",
        GMAIL + "/messages/{messageId}/trash",
        properties=MESSAGE,
        message="Message moved to trash",
    ),
    rest(
        "gmail_modify_labels",
        "Add or remove labels on a Gmail message",
        "POST",
        GMAIL + "/messages/{messageId}/modify",
        properties={**MESSAGE, "addLabelIds": array(), "removeLabelIds": array()},
        body=("addLabelIds", "removeLabelIds"),
    ),
    rest("gmail_list_labels", "List Gmail labels", "GET", GMAIL + "/labels"),
    rest(
        "gmail_create_label",
        "Create a Gmail label",
        "POST",
        GMAIL + "/labels",
        properties={"name": string("Label name")},
        required=["name"],
        body=("name",),
    ),
    rest(
        "gmail_delete_label",
        "Delete a Gmail label",
        "DELETE",
        GMAIL + "/labels/{labelId}",
        properties={"labelId": string()},
        message="Label deleted",
    ),
    rest(
        "gmail_list_drafts",
        "List Gmail drafts",
        "GET",
        GMAIL + "/drafts",
        properties={"maxResults": number()},
        query=("maxResults",),
    ),
    tool(
        "gmail_create_draft",
        "Create a Gmail draft",
        create_draft,
        properties=MESSAGE_FIELDS,
        required=["to", "subject", "body"],
    ),
    rest("gmail_get_profile", "Get Gmail profile", "GET", GMAIL + "/profile"),
    # drive
    rest(
        "drive_list_files",
        "List files in Google Drive",
        "GET",
        DRIVE + "/files",
        properties={
            "maxResults": number("Page size"),
            "query": string("Drive query, e.g. name contains 'report'"),
            "pageToken": string(),
        },
        query=("maxResults", "query", "pageToken"),
        renames={"maxResults": "pageSize", "query": "q"},
    ),
    rest(
        "drive_get_file",
        "Get file metadata",
        "GET",
        DRIVE + "/files/{fileId}",
        properties={**FILE, "fields": string("Fields selector (default: all)")},
        query=("fields",),
        static_query={"fields": "*"},
    ),
    tool(
        "drive_create_folder",
        "Create a folder",
        create_folder,
        properties={"name": string(), "parentId": string("Parent folder id")},
        required=["name"],
    ),
    rest(
        "drive_delete_file",
        "Delete a file",
        "DELETE",
        DRIVE + "/files/{fileId}",
        properties=FILE,
        message="File deleted",
    ),
    rest(
        "drive_copy_file",
        "Copy a file",
        "POST",
        DRIVE + "/files/{fileId}/copy",
        properties={**FILE, "name": string("Name of the copy")},
        body=("name",),
    ),
    rest(
        "drive_share_file",
        "Share a file",
        "POST",
        DRIVE + "/files/{fileId}/permissions",
        properties={
            **FILE,
            "email": string("Address to share with"),
            "role": string(enum=["reader", "commenter", "writer", "fileOrganizer", "organizer", "owner"]),
        },
        required=["email", "role"],
        body=("email", "role"),
        static_body={"type": "user"},
        renames={"email": "emailAddress"},
    ),
    rest(
        "drive_list_permissions",
        "List file permissions",
        "GET",
        DRIVE + "/files/{fileId}/permissions",
        properties=FILE,
        static_query={"fields": "*"},
    ),
    rest(
        "drive_search_files",
        "Search files",
        "GET",
        DRIVE + "/files",
        properties={"query": string("Drive query")},
        required=["query"],
        query=("query",),
        renames={"query": "q"},
        static_query={"fields": "files(id,name,mimeType)"},
    ),
    rest(
        "drive_export_file",
        "Export a Google Docs editors file to another format",
        "GET",
        DRIVE + "/files/{fileId}/export",
        properties={**FILE, "mimeType": string("Target MIME type, e.g. text/plain")},
        required=["mimeType"],
        query=("mimeType",),
    ),
    rest(
        "drive_get_file_content",
        "Get file content",
        "GET",
        DRIVE + "/files/{fileId}",
        properties=FILE,
        static_query={"alt": "media"},
    ),
    rest(
        "drive_get_about",
        "Get storage quota and user information",
        "GET",
        DRIVE + "/about",
        properties={"fields": string()},
        query=("fields",),
        static_query={"fields": "storageQuota,user"},
    ),
    rest(
        "drive_empty_trash",
        "Permanently delete every trashed file",
        "DELETE",
        DRIVE + "/files/trash",
        message="Trash emptied successfully",
    ),
    # calendar
    rest(
        "calendar_list_calendars",
        "List calendars on the user's calendar list",
        "GET",
        "https://www.googleapis.com/calendar/v3/users/me/calendarList",
    ),
    rest(
        "calendar_list_events",
        "List calendar events",
        "GET",
        CALENDAR + "/{calendarId}/events",
        fallback_path=CALENDAR + "/primary/events",
        properties={
            **CALENDAR_ID,
            "maxResults": number(),
            "timeMin": string("RFC 3339 lower bound"),
            "timeMax": string("RFC 3339 upper bound"),
            "query": string("Free-text search"),
        },
        query=("maxResults", "timeMin", "timeMax", "query"),
        renames={"query": "q"},
    ),
    rest(
        "calendar_get_event",
        "Get calendar event",
        "GET",
        CALENDAR + "/{calendarId}/events/{eventId}",
        fallback_path=CALENDAR + "/primary/events/{eventId}",
        properties={**CALENDAR_ID, **EVENT},
        required=["eventId"],
    ),
    tool(
        "calendar_create_event",
        "Create calendar event",
        create_event,
        properties={
            **CALENDAR_ID,
            "summary": string(),
            "start": string("RFC 3339 timestamp, or YYYY-MM-DD for all-day"),
            "end": string("RFC 3339 timestamp, or YYYY-MM-DD for all-day"),
            "description": string(),
            "location": string(),
            "attendees": array("Attendee email addresses"),
        },
        required=["summary", "start", "end"],
    ),
    tool(
        "calendar_update_event",
        "Update calendar event",
        update_event,
        properties={**CALENDAR_ID, **EVENT, "updates": obj("Event fields to change")},
        required=["eventId", "updates"],
    ),
    rest(
        "calendar_delete_event",
        "Delete calendar event",
        "DELETE",
        CALENDAR + "/{calendarId}/events/{eventId}",
        fallback_path=CALENDAR + "/primary/events/{eventId}",
        properties={**CALENDAR_ID, **EVENT},
        required=["eventId"],
        message="Event deleted",
    ),
    # sheets
    rest(
        "sheets_get_values",
        "Get spreadsheet values",
        "GET",
        SHEETS + "/{spreadsheetId}/values/{range}",
        properties={**SPREADSHEET, **RANGE},
    ),
    rest(
        "sheets_update_values",
        "Update spreadsheet values",
        "PUT",
        SHEETS + "/{spreadsheetId}/values/{range}",
        properties={**SPREADSHEET, **RANGE, **VALUES},
        required=["values"],
        body=("values",),
        static_query={"valueInputOption": "RAW"},
    ),
    rest(
        "sheets_append_values",
        "Append values to sheet",
        "POST",
        SHEETS + "/{spreadsheetId}/values/{range}:append",
        properties={**SPREADSHEET, **RANGE, **VALUES},
        required=["values"],
        body=("values",),
        static_query={"valueInputOption": "RAW"},
    ),
    rest(
        "sheets_clear_values",
        "Clear spreadsheet values",
        "POST",
        SHEETS + "/{spreadsheetId}/values/{range}:clear",
        properties={**SPREADSHEET, **RANGE},
        static_body={},
        message="Values cleared",
    ),
    tool(
        "sheets_create_spreadsheet",
        "Create a spreadsheet",
        create_spreadsheet,
        properties={"title": string()},
        required=["title"],
    ),
    rest(
        "sheets_get_spreadsheet",
        "Get spreadsheet metadata",
        "GET",
        SHEETS + "/{spreadsheetId}",
        properties=SPREADSHEET,
    ),
    rest(
        "sheets_batch_update",
        "Batch update spreadsheet",
        "POST",
        SPREADSHEET_BATCH,
        properties={**SPREADSHEET, "requests": array("Sheets API request objects", items={"type": "object"})},
        required=["requests"],
        body=("requests",),
    ),
    tool(
        "sheets_add_sheet",
        "Add a new sheet",
        BatchEdit(
            SPREADSHEET_BATCH,
            lambda args: {"addSheet": {"properties": {"title": args["title"]}}},
            "Sheet added",
        ),
        properties={**SPREADSHEET, "title": string()},
        required=["spreadsheetId", "title"],
    ),
    tool(
        "sheets_delete_sheet",
        "Delete a sheet",
        BatchEdit(
            SPREADSHEET_BATCH,
            lambda args: {"deleteSheet": {"sheetId": args["sheetId"]}},
            "Sheet deleted",
        ),
        properties={**SPREADSHEET, "sheetId": number("Numeric sheet id")},
        required=["spreadsheetId", "sheetId"],
    ),
    rest(
        "sheets_copy_sheet",
        "Copy a sheet to another spreadsheet",
        "POST",
        SHEETS + "/{spreadsheetId}/sheets/{sheetId}:copyTo",
        properties={
            **SPREADSHEET,
            "sheetId": number("Numeric sheet id"),
            "destinationSpreadsheetId": string(),
        },
        required=["destinationSpreadsheetId"],
        body=("destinationSpreadsheetId",),
    ),
    # docs
    rest("docs_get_document", "Get document content", "GET", DOCS + "/{documentId}", properties=DOCUMENT),
    tool(
        "docs_create_document",
        "Create a document",
        create_document,
        properties={"title": string()},
        required=["title"],
    ),
    tool(
        "docs_insert_text",
        "Insert text in document",
        BatchEdit(
            DOCUMENT_BATCH,
            lambda args: {
                "insertText": {"text": args["text"], "location": {"index": args.get("index") or 1}}
            },
            "Text inserted",
        ),
        properties={**DOCUMENT, "text": string(), "index": number("Insertion index (default: 1)")},
        required=["documentId", "text"],
    ),
    tool(
        "docs_delete_text",
        "Delete text from document",
        BatchEdit(
            DOCUMENT_BATCH,
            lambda args: {
                "deleteContentRange": {
                    "range": {"startIndex": args["startIndex"], "endIndex": args["endIndex"]}
                }
            },
            "Text deleted",
        ),
        properties={**DOCUMENT, "startIndex": number(), "endIndex": number()},
        required=["documentId", "startIndex", "endIndex"],
    ),
    tool(
        "docs_replace_text",
        "Replace text in document",
        BatchEdit(
            DOCUMENT_BATCH,
            lambda args: {
                "replaceAllText": {
                    "containsText": {"text": args["find"], "matchCase": False},
                    "replaceText": args["replace"],
                }
            },
            "Text replaced",
        ),
        properties={**DOCUMENT, "find": string(), "replace": string()},
        required=["documentId", "find", "replace"],
    ),
]


class GoogleMCPServer(MCPServer):
    """Google Workspace integration implemented via MCP."""

    def __init__(self, client: ApiClient):
        super().__init__(SERVER_ID, CATALOGUE, client, version="1.0.0")

    @classmethod
    def from_service_account(
        cls,
        key: SecretStr | str,
        *,
        user_email: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ) -> "GoogleMCPServer":
        credentials = load_service_account(key, subject=user_email)
        client = AuthenticatedApiClient(
            google_profile(base_url),
            ServiceAccountTokenSource(credentials),
            timeout=timeout,
        )
        return cls(client)
