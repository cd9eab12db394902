"""Bloch state, integrator, trail and simulation control."""
