"""API routers and shared request parameters."""
from typing import Annotated

from fastapi import Path

from backoffice.data.database.connection import MAX_DB_INT

RowId = Annotated[int, Path(ge=0, le=MAX_DB_INT, description="Row ID")]
