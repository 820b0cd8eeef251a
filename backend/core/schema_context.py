"""
Schema context — the fixed analytics schema rendered for SQL generation.
Built once at startup and shared read-only by every request.
"""
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from models.table import ColumnMetadata, DateColumnCorrection, TableMetadata

logger = logging.getLogger(__name__)


def _col(name: str, data_type: str, *, pk: bool = False, unique: bool = False,
         nullable: bool = False, fk: Optional[str] = None, default: Optional[str] = None) -> ColumnMetadata:
    return ColumnMetadata(
        name=name,
        data_type=data_type,
        is_nullable=nullable,
        is_primary_key=pk,
        is_unique=unique,
        foreign_key_ref=fk,
        default=default,
    )


def _timestamps() -> tuple[ColumnMetadata, ...]:
    return (
        _col("createdAt", "TIMESTAMP", default="now()"),
        _col("updatedAt", "TIMESTAMP"),
    )


ANALYTICS_TABLES: tuple[TableMetadata, ...] = (
    TableMetadata(
        table_name="Product",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("sku", "TEXT", unique=True),
            _col("name", "TEXT"),
            _col("description", "TEXT", nullable=True),
            _col("price", "DOUBLE PRECISION"),
            _col("cost", "DOUBLE PRECISION"),
            _col("categoryId", "INTEGER", fk="Category.id"),
            _col("inventory", "INTEGER", default="0"),
            *_timestamps(),
        ),
        primary_date_column="createdAt",
        notes=(
            'Category relation via "categoryId".',
            '"sku", "name", "price" and "inventory" are the usual product analysis fields.',
        ),
    ),
    TableMetadata(
        table_name="Category",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("name", "TEXT", unique=True),
            _col("description", "TEXT", nullable=True),
            *_timestamps(),
        ),
        notes=('Joined from "Product" via "categoryId".',),
    ),
    TableMetadata(
        table_name="Customer",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("firstName", "TEXT"),
            _col("lastName", "TEXT"),
            _col("email", "TEXT", unique=True),
            _col("phone", "TEXT", nullable=True),
            _col("address", "TEXT", nullable=True),
            _col("city", "TEXT", nullable=True),
            _col("state", "TEXT", nullable=True),
            _col("zipCode", "TEXT", nullable=True),
            _col("country", "TEXT", nullable=True),
            _col("regionId", "INTEGER", fk="Region.id"),
            *_timestamps(),
            _col("lastPurchase", "TIMESTAMP", nullable=True),
        ),
        primary_date_column="createdAt",
        notes=(
            'Last activity is "lastPurchase".',
            'Linked to "Region" via "regionId".',
            'Use "country", "city", "state" for geographical filters.',
        ),
    ),
    TableMetadata(
        table_name="Order",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("customerId", "INTEGER", fk="Customer.id"),
            _col("orderDate", "TIMESTAMP", default="now()"),
            _col("status", "TEXT", default="'pending'"),
            _col("totalAmount", "DOUBLE PRECISION"),
            _col("shippingCost", "DOUBLE PRECISION", default="0"),
            _col("taxAmount", "DOUBLE PRECISION", default="0"),
            _col("discount", "DOUBLE PRECISION", default="0"),
            *_timestamps(),
        ),
        primary_date_column="orderDate",
        notes=(
            '"totalAmount" includes shipping, tax and discount.',
            'Join to "Customer" on "customerId" (there is no customer name column here).',
            '"Order" is a reserved word and must always be quoted.',
        ),
    ),
    TableMetadata(
        table_name="OrderItem",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("orderId", "INTEGER", fk="Order.id"),
            _col("productId", "INTEGER", fk="Product.id"),
            _col("quantity", "INTEGER"),
            _col("unitPrice", "DOUBLE PRECISION"),
            _col("discount", "DOUBLE PRECISION", default="0"),
            _col("subtotal", "DOUBLE PRECISION"),
        ),
        notes=('Use "quantity", "unitPrice", "discount" and "subtotal" for calculations.',),
    ),
    TableMetadata(
        table_name="Employee",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("firstName", "TEXT"),
            _col("lastName", "TEXT"),
            _col("email", "TEXT", unique=True),
            _col("phone", "TEXT", nullable=True),
            _col("position", "TEXT"),
            _col("departmentId", "INTEGER", fk="Department.id"),
            _col("hireDate", "TIMESTAMP"),
            _col("salary", "DOUBLE PRECISION"),
            _col("isActive", "BOOLEAN", default="true"),
            *_timestamps(),
        ),
        primary_date_column="hireDate",
        notes=('Use "salary", "position", "isActive" for employee reports.',),
    ),
    TableMetadata(
        table_name="Department",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("name", "TEXT", unique=True),
            _col("description", "TEXT", nullable=True),
            _col("managerId", "INTEGER", nullable=True),
            _col("budget", "DOUBLE PRECISION"),
            *_timestamps(),
        ),
        notes=('Used for staff grouping; has "budget" and "managerId".',),
    ),
    TableMetadata(
        table_name="Campaign",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("name", "TEXT"),
            _col("description", "TEXT", nullable=True),
            _col("startDate", "TIMESTAMP"),
            _col("endDate", "TIMESTAMP", nullable=True),
            _col("budget", "DOUBLE PRECISION"),
            _col("spend", "DOUBLE PRECISION", default="0"),
            _col("platform", "TEXT", nullable=True),
            _col("target", "TEXT", nullable=True),
            _col("leads", "INTEGER", default="0"),
            _col("conversions", "INTEGER", default="0"),
            _col("revenue", "DOUBLE PRECISION", default="0"),
            *_timestamps(),
        ),
        primary_date_column="startDate",
        notes=(
            'Use "startDate" / "endDate" (there is NO "date" column).',
            '"budget", "spend", "leads", "conversions" and "revenue" are the campaign metrics.',
        ),
    ),
    TableMetadata(
        table_name="Region",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("name", "TEXT", unique=True),
            _col("country", "TEXT"),
            *_timestamps(),
        ),
        notes=('Joined from "Customer" via "regionId"; group by "name" or "country".',),
    ),
    TableMetadata(
        table_name="SalesPerformance",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("date", "TIMESTAMP"),
            _col("regionId", "INTEGER", fk="Region.id"),
            _col("categoryId", "INTEGER", fk="Category.id"),
            _col("revenue", "DOUBLE PRECISION"),
            _col("targetSales", "DOUBLE PRECISION"),
            *_timestamps(),
        ),
        primary_date_column="date",
        notes=('Contains "revenue" and "targetSales"; join via "regionId" / "categoryId".',),
    ),
    TableMetadata(
        table_name="FinancialMetrics",
        columns=(
            _col("id", "INTEGER", pk=True),
            _col("date", "TIMESTAMP"),
            _col("revenue", "DOUBLE PRECISION"),
            _col("expenses", "DOUBLE PRECISION"),
            _col("profit", "DOUBLE PRECISION"),
            _col("cashflow", "DOUBLE PRECISION"),
            _col("assets", "DOUBLE PRECISION"),
            _col("liabilities", "DOUBLE PRECISION"),
            _col("equityValue", "DOUBLE PRECISION"),
            *_timestamps(),
        ),
        primary_date_column="date",
        notes=('All company-level financial data lives here ("revenue", "expenses", "profit", "cashflow", ...).',),
    ),
)

DATE_COLUMN_CORRECTIONS: tuple[DateColumnCorrection, ...] = (
    DateColumnCorrection(table="Campaign", start_column="startDate", end_column="endDate"),
)

GUIDANCE: tuple[str, ...] = (
    'All table and column names are case-sensitive and must be quoted with double quotes (e.g. "Order", "orderDate").',
    'Only join through the foreign keys listed above; do not invent joins.',
    'Use SUM, AVG, COUNT for numerical analysis and GROUP BY whenever aggregating.',
    'Qualify every column with its table alias (e.g. c."startDate", not "startDate").',
    'Return PostgreSQL that is syntactically correct and answers the question.',
)

COMMON_MISTAKES: tuple[str, ...] = (
    'Using "date" on "Campaign" -> use "startDate" / "endDate".',
    'Unquoted table or column names -> quote them: "Product", "orderDate".',
    'Undefined columns such as "customerName" -> use "firstName", "lastName" from "Customer".',
    'Aggregates without GROUP BY -> add GROUP BY for every non-aggregated column.',
    'Financial questions answered from "Order" -> use "FinancialMetrics".',
    'Treating "Order" as a keyword -> always quote it as "Order".',
)


def _render_column(col: ColumnMetadata) -> str:
    flags = []
    if col.is_primary_key: flags.append("PRIMARY KEY")
    if col.is_unique:      flags.append("UNIQUE")
    if col.is_foreign_key: flags.append(f"REFERENCES {col.foreign_key_ref}")
    if not col.is_nullable and not col.is_primary_key: flags.append("NOT NULL")
    if col.default is not None: flags.append(f"DEFAULT {col.default}")
    flag_str = f" {' '.join(flags)}" if flags else ""
    return f'  "{col.name}" {col.data_type}{flag_str}'


def _render_table(table: TableMetadata) -> str:
    cols = ",\n".join(_render_column(c) for c in table.columns)
    return f'TABLE "{table.table_name}" (\n{cols}\n)'


class SchemaContext(BaseModel):
    """Immutable description of the analytics schema plus generation guidance."""
    model_config = ConfigDict(frozen=True)

    tables: tuple[TableMetadata, ...]
    date_column_corrections: tuple[DateColumnCorrection, ...] = ()
    guidance: tuple[str, ...] = ()
    common_mistakes: tuple[str, ...] = ()

    @property
    def schema_text(self) -> str:
        """Minimal schema: one CREATE-style block per table."""
        return "\n\n".join(_render_table(t) for t in self.tables)

    @property
    def annotated_schema(self) -> str:
        """Schema plus per-table notes, the date-column map and common mistakes."""
        sections = [self.schema_text, "", "-- GUIDELINES:"]
        sections += [f"-- {i}. {g}" for i, g in enumerate(self.guidance, start=1)]

        sections += ["", "-- TABLE NOTES:"]
        for t in self.tables:
            if not (t.notes or t.primary_date_column):
                continue
            sections.append(f'-- {t.table_name.upper()}:')
            if t.primary_date_column:
                sections.append(f'--   - Primary date column: "{t.primary_date_column}"')
            sections += [f"--   - {n}" for n in t.notes]

        if self.date_column_corrections:
            sections += ["", "-- DATE COLUMNS (no generic date column on these tables):"]
            for c in self.date_column_corrections:
                sections.append(
                    f'--   - "{c.table}": use "{c.start_column}" / "{c.end_column}", NOT "{c.generic_column}"'
                )

        if self.common_mistakes:
            sections += ["", "-- COMMON MISTAKES TO AVOID:"]
            sections += [f"--   - {m}" for m in self.common_mistakes]
        return "\n".join(sections)

    def table(self, name: str) -> Optional[TableMetadata]:
        return next((t for t in self.tables if t.table_name == name), None)


def build_schema_context() -> SchemaContext:
    ctx = SchemaContext(
        tables=ANALYTICS_TABLES,
        date_column_corrections=DATE_COLUMN_CORRECTIONS,
        guidance=GUIDANCE,
        common_mistakes=COMMON_MISTAKES,
    )
    logger.info("Schema context built: %d tables, %d date corrections",
                len(ctx.tables), len(ctx.date_column_corrections))
    return ctx
