"""Point datasets and the dataset registry."""

from .points import Point, load_points, normalize, shuffle, split, to_arrays
from .registry import DatasetSpec, available_datasets, get_dataset, make_blobs, register_dataset

__all__ = [
    "DatasetSpec",
    "Point",
    "available_datasets",
    "get_dataset",
    "load_points",
    "make_blobs",
    "normalize",
    "register_dataset",
    "shuffle",
    "split",
    "to_arrays",
]
