"""Utility helpers for runcmd."""
