"""Schema generator plugins."""

from .class_generator import ClassGenerator
from .datamodel_generator import DatamodelCodeGenerator

__all__ = ["ClassGenerator", "DatamodelCodeGenerator"]
