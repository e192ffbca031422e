"""Persistence: JSONL history and JSON profile."""
