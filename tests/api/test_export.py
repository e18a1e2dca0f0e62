"""Tests for POST /api/export."""

import io

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from src.services.table_export import SHEET_TITLE, XLSX_MEDIA_TYPE


def test_export_returns_workbook(client: TestClient, sample_table):
    response = client.post(
        "/api/export", json={"table": sample_table, "sourceName": "plant.pdf"}
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert (
        response.headers["content-disposition"]
        == 'attachment; filename="terminal_assignment_plant.xlsx"'
    )
    ws = load_workbook(io.BytesIO(response.content)).active
    assert ws.title == SHEET_TITLE
    assert ws.max_row == 3


def test_default_file_name(client: TestClient, sample_table):
    response = client.post("/api/export", json={"table": sample_table})
    assert 'filename="terminal_assignment.xlsx"' in response.headers["content-disposition"]


def test_not_a_table(client: TestClient):
    response = client.post("/api/export", json={"table": {"controller": "Carel"}})
    assert response.status_code == 400
    assert response.json() == {
        "error": "Invalid request: table must contain 'controller' and a 'rows' list",
        "error_code": "E-1005",
    }


def test_missing_table_field(client: TestClient):
    response = client.post("/api/export", json={"sourceName": "a.pdf"})
    assert response.status_code == 400
    assert response.json()["error_code"] == "E-1005"


def test_control_characters_do_not_fail_export(client: TestClient, sample_table):
    sample_table["rows"][1]["cable"] = "NYM\x0b3x1.5"
    response = client.post("/api/export", json={"table": sample_table})
    assert response.status_code == 200
