"""Storage drivers and schema management for the dashboard database."""
