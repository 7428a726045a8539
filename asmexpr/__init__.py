"""Symbolic expressions of assemblers and disassemblers."""
