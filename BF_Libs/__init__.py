"""
BF_Libs - Banner Frame Library Modules

This package contains the placeholder compositing engine for Banner Frame,
organized into specialized sub-packages:

- GeometryLib: Coordinate mapping, placeholder regions and photo transforms
- EditorLib: Interactive placeholder editor (controller and PyQt5 window)
- CompositingLib: Image decoding, compositing sessions, rendering and export
"""

__version__ = "0.1.0"
