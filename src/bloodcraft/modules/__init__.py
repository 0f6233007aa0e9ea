"""Gameplay modules for Bloodcraft."""
