"""
Pagesmith - Landing page generation, editing and publishing.

Turns a title plus optional source material (content document, wireframe,
design inspiration) into a structured landing page document, lets it be
edited section by section with a live preview, and publishes it to
WordPress or exports it as static HTML.
"""

__version__ = "0.1.0"
__author__ = "Pagesmith Team"
