from core.schema_context import SchemaContext, build_schema_context  # noqa: F401
from core.sql_corrector import SQLCorrector, correct_sql  # noqa: F401
from core.result_shaper import shape_rows  # noqa: F401
from core.fallback import synthesize_fallback  # noqa: F401
from core.query_pipeline import QueryPipeline  # noqa: F401
