"""
EditorLib - Placeholder editing for campaign owners

The controller is importable without a GUI toolkit; the PyQt5 window lives
in `BF_Libs.EditorLib.placeholder_editor_window` and is imported on demand.
"""

from BF_Libs.EditorLib.placeholder_editor import PlaceholderEditor

__all__ = [
    "PlaceholderEditor",
]
