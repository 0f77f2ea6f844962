from .schema import validate_dataframe_schema
from .quality import check_data_quality, sparse_columns

__all__ = ["validate_dataframe_schema", "check_data_quality", "sparse_columns"]
