"""Minimal single-page RSS viewer backed by a feed-to-JSON service."""
