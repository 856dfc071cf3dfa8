"""Webhook verification and event classification."""
