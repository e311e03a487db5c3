"""Core (UI-agnostic) school statistics dashboard logic.

This package contains:
- data loading (JSON -> normalized pandas records)
- filter normalization and application
- aggregation and pagination helpers
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
