"""Ambient Analytics: explore a Postgres schema and ask it questions in plain language."""

__version__ = "0.1.0"
