"""Nostr Addressing CLI."""
