"""
Code lookup table backed by a Google Sheets spreadsheet.

The sheet holds three columns (status, code, link) below a header row. A
message whose text equals one of the codes is answered with the matching
link instead of being stored.

Lifecycle:
- One SheetsCodeTable is created at startup and kept on app.state
- The first lookup loads the sheet lazily
- refresh() reloads it explicitly (HTTP endpoint and the background scheduler)
- Everything else only reads
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

logger = logging.getLogger("CodeTable")

SHEETS_API_BASE = "https://sheets.googleapis.com"


@dataclass(frozen=True)
class CodeRow:
    """One data row of the code table."""

    row: int  # Spreadsheet row number (header is row 1)
    status: str
    code: str
    link: str


def parse_rows(values: list[list[str]]) -> list[CodeRow]:
    """
    Convert the raw values grid (header included) into CodeRow objects.

    Raises:
        ValueError: The grid is not a list of rows of cells
    """
    if not isinstance(values, list) or not all(isinstance(raw, list) for raw in values):
        raise ValueError("Sheets values must be a list of rows")
    rows = []
    for index, raw in enumerate(values[1:]):
        cells = [str(cell) for cell in raw] + [""] * (3 - len(raw))
        rows.append(CodeRow(row=index + 2, status=cells[0], code=cells[1], link=cells[2]))
    return rows


class SheetsCodeTable:
    """Process-wide cache of the code -> link table."""

    def __init__(
        self,
        spreadsheet_id: Optional[str],
        api_key: Optional[str],
        value_range: str = "A:C",
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self._api_key = api_key
        self._range = value_range
        self._http = http_client or httpx.AsyncClient(base_url=SHEETS_API_BASE, timeout=10.0)
        self._rows: list[CodeRow] = []
        self._by_code: dict[str, CodeRow] = {}
        self._loaded = False
        self._refresh_lock: Optional[asyncio.Lock] = None
        self.last_refreshed_at: Optional[datetime] = None

        if not self.configured:
            logger.warning("Code table not configured (CODE_TABLE_URL / GOOGLE_API_KEY missing) - lookups disabled")

    @property
    def configured(self) -> bool:
        return bool(self.spreadsheet_id and self._api_key)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def rows(self) -> list[CodeRow]:
        return list(self._rows)

    def _get_refresh_lock(self) -> asyncio.Lock:
        if self._refresh_lock is None:
            self._refresh_lock = asyncio.Lock()
        return self._refresh_lock

    async def refresh(self) -> list[CodeRow]:
        """
        Reload the table from the spreadsheet.

        Returns:
            The freshly loaded rows

        Raises:
            RuntimeError: The table is not configured
            httpx.HTTPError: The Sheets API call failed (previous rows are kept)
            ValueError: The response was not a values grid (previous rows are kept)
        """
        if not self.configured:
            raise RuntimeError("code table is not configured")

        async with self._get_refresh_lock():
            response = await self._http.get(
                f"/v4/spreadsheets/{self.spreadsheet_id}/values/{self._range}",
                params={"key": self._api_key},
            )
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("Unexpected Sheets response")
            rows = parse_rows(payload.get("values", []))

            self._rows = rows
            # First occurrence wins when a code appears twice
            self._by_code = {}
            for row in rows:
                self._by_code.setdefault(row.code, row)
            self._loaded = True
            self.last_refreshed_at = datetime.now(timezone.utc)

        logger.info(f"📄 Code table refreshed: {len(rows)} rows")
        return rows

    async def ensure_loaded(self) -> None:
        """Load the table on first use; failures are logged and leave it empty."""
        if self._loaded or not self.configured:
            return
        try:
            await self.refresh()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error loading code table: {e}")

    async def lookup(self, code: str) -> Optional[CodeRow]:
        """Find the row whose code exactly equals the given text."""
        await self.ensure_loaded()
        if not code:
            return None
        return self._by_code.get(code)

    async def aclose(self) -> None:
        await self._http.aclose()
