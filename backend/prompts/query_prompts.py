"""
LangChain prompt templates for SQL generation, regeneration and result explanation.
"""
from langchain_core.prompts import PromptTemplate

# ── SQL generation ────────────────────────────────────────────────────────────

SQL_SYSTEM_TEMPLATE = """\
You are an advanced SQL expert that translates natural language business questions into PostgreSQL queries.

You'll be given the database schema and a business question. Generate a correct, optimized SQL query that answers it.

IMPORTANT GUIDELINES:
1. Quote every table name with double quotes exactly as shown in the schema (e.g. "Product", not product).
2. Only use columns that actually exist in the tables.
3. Pay attention to date columns:
   - "Campaign" has "startDate" and "endDate" (NOT "date")
   - "FinancialMetrics" and "SalesPerformance" have a "date" column
   - "Order" uses "orderDate"
4. Use explicit JOINs and table aliases for every column reference (e.g. c."startDate", not just "startDate").
5. Use aggregate functions with GROUP BY when summarising, and CTEs for complex queries.

Only return the SQL query, without any explanation or markdown formatting.

Here's the database schema:
{schema}
"""

SQL_USER_TEMPLATE = 'Generate a PostgreSQL query that answers this business question: "{question}"'

sql_system_prompt = PromptTemplate(input_variables=["schema"], template=SQL_SYSTEM_TEMPLATE)
sql_user_prompt = PromptTemplate(input_variables=["question"], template=SQL_USER_TEMPLATE)

# ── Regeneration after an execution error ─────────────────────────────────────

SQL_REGENERATION_TEMPLATE = """\
### Database Schema
{schema}

### User's Natural Language Query
{question}

### Initial Generated SQL
{failed_sql}

### Error Returned
{error}

### Instruction
Please regenerate a corrected SQL query based on the above schema, query, and error.
Make sure:
- All table and column names exist
- Joins are correct
- SQL syntax is valid
"""

sql_regeneration_prompt = PromptTemplate(
    input_variables=["schema", "question", "failed_sql", "error"],
    template=SQL_REGENERATION_TEMPLATE,
)

# ── Result explanation ────────────────────────────────────────────────────────

EXPLAIN_SYSTEM_PROMPT = """\
You are an advanced data analyst who explains SQL query results in clear, natural language.

You'll be given a business question, the SQL query used to answer it, and the query results. Your task is to:
1. Analyze the data thoroughly
2. Explain in natural language what the data shows
3. Highlight key insights, trends, or patterns
4. Choose the most appropriate chart type for visualizing this data (bar, line, or pie)

Chart type guidelines:
- 'bar' for comparisons across categories
- 'line' for time series data or trends
- 'pie' for composition/percentage breakdown
- Default to 'bar' if unsure

Respond with a JSON object with exactly two fields:
"answer": your natural language explanation
"chartType": the recommended chart type (bar, line, or pie)
"""

EXPLAIN_USER_TEMPLATE = """\
Business Question: "{question}"

SQL Query:
{sql}

Query Results{truncation_note}:
{results}

Provide your analysis and chart recommendation:"""

explain_user_prompt = PromptTemplate(
    input_variables=["question", "sql", "results", "truncation_note"],
    template=EXPLAIN_USER_TEMPLATE,
)
