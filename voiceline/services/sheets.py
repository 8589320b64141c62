"""Google Sheets v4 helpers for appending ledger rows."""

from __future__ import annotations

from typing import Any, Sequence

import google.auth
import httplib2
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
INSERT_ROWS = "INSERT_ROWS"
USER_ENTERED = "USER_ENTERED"


def load_credentials(credentials_file: str | None = None):
    """Return Sheets-scoped credentials from a service account file or ADC."""

    if credentials_file:
        return service_account.Credentials.from_service_account_file(
            credentials_file,
            scopes=[SHEETS_SCOPE],
        )
    credentials, _ = google.auth.default(scopes=[SHEETS_SCOPE])
    return credentials


class GoogleSheetsBackend:
    """Blocking Sheets client; callers run it in a worker thread.

    ``httplib2.Http`` is not thread-safe, so every append builds its own
    authorized transport over the shared credentials.
    """

    def __init__(self, credentials, *, http_timeout: float | None = None) -> None:
        self._credentials = credentials
        self._http_timeout = http_timeout
        self._service = build(
            "sheets",
            "v4",
            credentials=credentials,
            cache_discovery=False,
        )

    def append_row(
        self,
        spreadsheet_id: str,
        target_range: str,
        values: Sequence[Any],
        insert_mode: str = INSERT_ROWS,
    ) -> dict[str, Any]:
        request = self._service.spreadsheets().values().append(
            spreadsheetId=spreadsheet_id,
            range=target_range,
            valueInputOption=USER_ENTERED,
            insertDataOption=insert_mode,
            body={"values": [list(values)]},
        )
        http = AuthorizedHttp(
            self._credentials,
            http=httplib2.Http(timeout=self._http_timeout),
        )
        return request.execute(http=http)


__all__ = [
    "GoogleSheetsBackend",
    "INSERT_ROWS",
    "SHEETS_SCOPE",
    "USER_ENTERED",
    "load_credentials",
]
