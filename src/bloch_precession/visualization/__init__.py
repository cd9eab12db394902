"""Matplotlib plots and the OpenGL renderer."""
