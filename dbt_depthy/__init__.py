"""dbt-depthy: longest-path depth of every model in a dbt DAG."""

__version__ = "0.1.0"
