from __future__ import annotations

import pytest

from spreadsheet_ingest.config import Settings
from spreadsheet_ingest.utils.logging import clear_context
from tests.fixtures import build_xlsx, sheet_xml


@pytest.fixture(autouse=True)
def _clear_log_context() -> None:
    """Keep request IDs from leaking between tests."""
    clear_context()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, max_file_size_mb=1)


@pytest.fixture
def invoice_rows_xlsx() -> bytes:
    """Two-row workbook: header from shared strings, data mixed."""
    worksheet = sheet_xml(
        [
            [("0", "s"), ("1", "s")],
            [("2", "s"), ("10.5", None)],
        ]
    )
    return build_xlsx(
        worksheet, shared_strings=["<t>Nombre</t>", "<t>Monto</t>", "<t>Ana</t>"]
    )


@pytest.fixture
def invoice_rows_csv() -> bytes:
    return b"Nombre,Monto\nAna,10.5\n\n"
