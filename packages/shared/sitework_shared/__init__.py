"""Shared schemas for the Sitework server and its clients."""
