from sqlalchemy.orm import declarative_base

Base = declarative_base()


def in_choices(column: str, values: tuple) -> str:
    """SQL text for a CHECK constraint limiting a column to fixed choices."""
    quoted = ", ".join("'" + value.replace("'", "''") + "'" for value in values)
    return f"{column} IN ({quoted})"
