"""Test package for kdpniche."""
