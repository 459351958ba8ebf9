"""Rulepack documents bundled with starforge."""
