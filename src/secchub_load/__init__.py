"""Weighted scenario load generator for the SecHub REST backend."""
