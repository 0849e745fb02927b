"""Authenticated HTTP transport and error mapping."""
