"""Gradio UI for Knowledge Search."""

from .app import build_interface, launch

__all__ = ["build_interface", "launch"]
