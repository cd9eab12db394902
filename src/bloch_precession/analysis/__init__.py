"""Trajectory analysis."""
