"""Shared kernel: exceptions, types, messages and time helpers used by every context."""
