"""Absences — policy catalog, balance aggregation, overlap detection, validation."""
