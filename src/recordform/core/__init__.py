"""Core types, records and exceptions shared by every layer."""
