"""Validation utilities.

Non-interactive tooling for checking the reader against known inputs.

Design goals
------------
1) Generate raw files whose every sample is known in advance.
2) Make odd containers (ASCII, mismatched counts, stepped data) easy to produce.
"""
