"""Table definition for one vector category."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Double,
    Index,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    func,
)
from sqlalchemy.dialects import mysql

from sqlvec.vectors.quantizer import code_length


def build_vector_table(
    name: str,
    dimension: int,
    storage_engine: str = "InnoDB",
    metadata: MetaData | None = None,
) -> Table:
    """Describe the record table of a category.

    Args:
        name: Physical table name.
        dimension: Vector dimension D of the category.
        storage_engine: MySQL storage engine; ignored by other dialects.
        metadata: MetaData to attach to. A private one is used by default.

    Returns:
        The table, with an index on ``binary_code``.
    """
    metadata = metadata if metadata is not None else MetaData()
    code_bytes = code_length(dimension)

    return Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("vector", JSON, nullable=False),
        Column("normalized_vector", JSON, nullable=False),
        Column("magnitude", Double, nullable=False),
        Column(
            "binary_code",
            LargeBinary(code_bytes).with_variant(mysql.BINARY(code_bytes), "mysql", "mariadb"),
            nullable=False,
        ),
        Column("model_tag", String(64), nullable=True),
        Column("created_at", DateTime, nullable=False, server_default=func.now()),
        Index(f"idx_{name}_binary_code", "binary_code"),
        mysql_engine=storage_engine,
    )
