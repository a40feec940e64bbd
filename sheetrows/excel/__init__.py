"""Grid abstraction and the pandas-backed spreadsheet grid provider."""
