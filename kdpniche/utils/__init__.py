"""Utility helpers for kdpniche modules."""

from .numbers import clamp, format_number, round_half_up, round_to, safe_div

__all__ = ["clamp", "format_number", "round_half_up", "round_to", "safe_div"]
