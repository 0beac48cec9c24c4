"""Core (UI-agnostic) sales indicators logic.

This package contains:
- spreadsheet ingestion (XLSX -> normalized SaleRecord list)
- store -> manager/city lookup parsing and reconciliation
- filter normalization
- aggregation functions (JSON-serializable payloads)
- export sink and chart helpers (Altair -> Vega-Lite spec dict)
"""
