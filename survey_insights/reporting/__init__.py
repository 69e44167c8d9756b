"""Markdown reporting for aggregated survey series."""
