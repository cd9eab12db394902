"""Constants, dataclasses and math helpers."""
