"""
Hand Segmentation
==================

Skin-color hand segmentation with fingertip detection for webcam frames.

Modules:
    - color: HSV conversion and per-channel Gaussian skin models
    - geometry: Points, coordinate mapping and convex hull
    - segmentation: Skin blobs, the two segmentation passes, fingertips
    - capture: Camera frame acquisition and calibration region sampling
    - recognition: Hand model summary and finger count testing
    - utils: Configuration, logging, performance monitoring, visualization
"""

__version__ = "1.0.0"
__author__ = "HCI Team"
