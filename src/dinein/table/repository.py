"""Repository for the Table aggregate."""

from dinein.domain import dinein
from dinein.table.table import Table


@dinein.repository(part_of=Table)
class TableRepository:
    """Tables are looked up by their human-readable number, never by id."""

    def find_by_table_number(self, table_number) -> Table | None:
        results = self._dao.query.filter(table_number=str(table_number)).all()
        if not results or not results.items:
            return None
        return results.first

    def find_by_status(self, status: str) -> list[Table]:
        return self._dao.query.filter(status=status).all().items
