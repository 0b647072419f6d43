"""Core (UI-agnostic) workforce dashboard logic.

This package contains:
- tabular decoding (XLSX/XLS/CSV -> header-keyed rows)
- date normalization (MM-DD-YYYY as the single comparison form)
- header mapping, the schedule record store and its queries
- call/care log productivity aggregation
- page compute functions (JSON-serializable payloads) and CSV export
"""
