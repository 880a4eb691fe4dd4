import numpy as np
import pytest

from app.models.financials import FinancialData
from app.services.value_extractor import extract_value, match_and_extract, parse_cell


@pytest.mark.parametrize("cell, expected", [
    (1500, 1500.0),
    (12.5, 12.5),
    (np.int64(42), 42.0),
    ("1,234.56", 1234.56),
    ("(500)", -500.0),
    ("€ 2.500", 2.5),
    ("$1,000,000", 1000000.0),
    ("£(1,250.50)", -1250.5),
    ("12abc", 12.0),
    ("-75", -75.0),
])
def test_parse_cell_numbers(cell, expected):
    assert parse_cell(cell) == pytest.approx(expected)


@pytest.mark.parametrize("cell", [
    None, "", "n.v.t.", "abc", True, float("nan"), float("inf"), float("-inf"), "1e400", "(1e400)", {"a": 1},
])
def test_parse_cell_skips_non_numbers(cell):
    assert parse_cell(cell) is None


def test_extract_value_no_numbers():
    rows = [{"omzet": None}, {"omzet": "onbekend"}, {"anders": 5}]
    assert extract_value(rows, "omzet") is None
    assert extract_value([], "omzet") is None


def test_extract_value_single_number():
    rows = [{"omzet": None}, {"omzet": "€ 1,000"}]
    assert extract_value(rows, "omzet") == 1000.0


def test_extract_value_prefers_last_value():
    rows = [{"omzet": 900}, {"omzet": 1100}, {"omzet": 1000}]
    assert extract_value(rows, "omzet") == 1000


def test_extract_value_takes_outlier_magnitude():
    # 5000 is more than twice the last value
    rows = [{"omzet": 5000}, {"omzet": 1200}, {"omzet": 2000}]
    assert extract_value(rows, "omzet") == 5000


def test_extract_value_outlier_threshold_is_strict():
    rows = [{"omzet": 4000}, {"omzet": 2000}]
    assert extract_value(rows, "omzet") == 2000


def test_extract_value_compares_magnitudes():
    rows = [{"resultaat": "(9,000)"}, {"resultaat": "1,000"}]
    assert extract_value(rows, "resultaat") == -9000.0


def test_match_and_extract_builds_financial_data():
    headers = ["jaar", "Totale Omzet", "Nettowinst", "Eigen Vermogen", "Schulden"]
    rows = [
        {"jaar": 2022, "Totale Omzet": "€ 900,000", "Nettowinst": 30000,
         "Eigen Vermogen": 800000, "Schulden": 150000},
        {"jaar": 2023, "Totale Omzet": "€ 1,000,000", "Nettowinst": "(20,000)",
         "Eigen Vermogen": 850000, "Schulden": None},
    ]
    data = match_and_extract(headers, rows)

    assert isinstance(data, FinancialData)
    assert data.omzet == 1000000.0
    assert data.nettowinst == -20000.0
    assert data.eigenVermogen == 850000.0
    assert data.kortlopendeSchulden == 150000.0
    # No current-assets column: absent, not zero
    assert data.vlottendeActiva is None


def test_match_and_extract_without_matches():
    data = match_and_extract(["Datum"], [{"Datum": "2024-01-01"}])
    assert data == FinancialData()
