"""Core acquisition, parsing and thumbnail logic."""
