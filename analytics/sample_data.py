"""Bundled demonstration dataset used when the user has not loaded any data."""

from __future__ import annotations

from typing import Any

SAMPLE_RECORDS: list[dict[str, Any]] = [
    {"date": "2024-01-01", "region": "North", "product": "Laptop", "sales": 1200, "units": 3},
    {"date": "2024-01-02", "region": "South", "product": "Phone", "sales": 800, "units": 4},
    {"date": "2024-01-03", "region": "East", "product": "Tablet", "sales": 450, "units": 2},
    {"date": "2024-01-04", "region": "West", "product": "Laptop", "sales": 2400, "units": 6},
    {"date": "2024-01-05", "region": "North", "product": "Phone", "sales": 600, "units": 3},
    {"date": "2024-01-06", "region": "South", "product": "Tablet", "sales": 900, "units": 4},
    {"date": "2024-01-07", "region": "East", "product": "Laptop", "sales": 1600, "units": 4},
    {"date": "2024-01-08", "region": "West", "product": "Phone", "sales": 1000, "units": 5},
    {"date": "2024-01-09", "region": "North", "product": "Tablet", "sales": 675, "units": 3},
    {"date": "2024-01-10", "region": "South", "product": "Laptop", "sales": 2000, "units": 5},
    {"date": "2024-01-11", "region": "East", "product": "Phone", "sales": 400, "units": 2},
    {"date": "2024-01-12", "region": "West", "product": "Tablet", "sales": 1125, "units": 5},
]
