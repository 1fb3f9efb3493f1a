"""Viewer state machine."""

from docview.viewer.machine import DocumentViewer
from docview.viewer.state import Phase, ViewerState

__all__ = ["DocumentViewer", "Phase", "ViewerState"]
