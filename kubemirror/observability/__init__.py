"""Logging setup for kubemirror."""
