"""
Forager serves IIIF Presentation 2.1 manifests for directories of images.
"""

__version__ = "0.1.0"
