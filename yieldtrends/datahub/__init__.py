from .cohort import select_top_entities
from .loader import load_crop_yields, load_land_use, read_table
from .observation import Observation
from .pipeline import ALL_TABLES, DataRequest, prepare_datasets
from .preprocess import observations_from_frame, pivot_crops_longer, tidy_yields

__all__ = [
    "ALL_TABLES",
    "DataRequest",
    "Observation",
    "load_crop_yields",
    "load_land_use",
    "observations_from_frame",
    "pivot_crops_longer",
    "prepare_datasets",
    "read_table",
    "select_top_entities",
    "tidy_yields",
]
