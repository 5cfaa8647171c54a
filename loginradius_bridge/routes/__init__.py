"""Blueprints for the LoginRadius bridge."""
