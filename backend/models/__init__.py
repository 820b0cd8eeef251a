from models.table import TableMetadata, ColumnMetadata, DateColumnCorrection  # noqa: F401
from models.query import QueryRequest, QueryResponse, Explanation, GeneratedQuery  # noqa: F401
