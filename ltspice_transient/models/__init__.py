from .metadata import BinaryLayout, RawMetadata, VariableSpec
from .dataset import TransientDataset

__all__ = [
    "BinaryLayout",
    "RawMetadata",
    "VariableSpec",
    "TransientDataset",
]
