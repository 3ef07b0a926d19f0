"""Quality assurance for generated road meshes."""

from .qa_tests import MeshQA

__all__ = ["MeshQA"]
