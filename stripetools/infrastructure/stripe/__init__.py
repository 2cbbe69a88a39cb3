"""Stripe HTTP adapter: request encoding, transport and response mapping."""
