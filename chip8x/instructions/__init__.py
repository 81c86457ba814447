"""Instruction handlers, one module per instruction area."""
