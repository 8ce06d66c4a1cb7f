"""
liftr - Containerized rendering for R Markdown documents

Builds a Docker image from the Dockerfile generated for a document and renders
the document inside a container, so the result does not depend on the host's
R installation.

Architecture:
- Rendering Context: image build, in-container render, render info sidecar
"""

__version__ = "0.1.0"
