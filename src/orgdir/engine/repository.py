"""Table repositories bound to storage, and the three-table directory.

Every public operation re-reads its file, so nothing loaded by one call is
seen by the next. Mutations follow one load -> mutate -> persist sequence
and persist only once every lookup and check has passed.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from orgdir.config import OrgConfig
from orgdir.contracts.common import ChangeRecord
from orgdir.contracts.errors import DuplicateIdError
from orgdir.contracts.responses import MemberRecord, TableMeta, ValidationResult
from orgdir.io.storage import FileStorage, Storage
from orgdir.model.actions import FieldAction
from orgdir.model.fields import Field
from orgdir.model.table import Table
from orgdir.observe.events import EventEmitter
from orgdir.validation.references import validate_dataset

ValueSource = Callable[[Field], str]


@dataclass(frozen=True)
class Mutation:
    """Outcome of a mutating repository call."""

    table: Table
    change: ChangeRecord
    persisted: bool
    backup_path: str | None = None


class TableRepository:
    """Read access to one table file."""

    def __init__(
        self,
        storage: Storage,
        name: str,
        filename: str,
        events: EventEmitter | None = None,
    ) -> None:
        self.storage = storage
        self.name = name
        self.filename = filename
        self.events = events or EventEmitter()

    @property
    def file(self) -> str:
        return self.storage.locate(self.filename)

    def fetch(self) -> Table:
        """Load the table from storage. Never cached."""
        table = Table.parse(self.storage.load(self.filename), source=self.filename)
        self.events.emit("table.loaded", {"table": self.name, "rows": len(table.rows)})
        return table

    def _load_checked(self) -> Table:
        table = self.fetch()
        table.validate_structure()
        return table

    def ids(self) -> list[str]:
        return self._load_checked().ids

    def meta(self, table: Table | None = None) -> TableMeta:
        table = table if table is not None else self.fetch()
        table.validate_structure()
        return TableMeta(
            name=self.name,
            file=self.file,
            id_field=table.header.id_field.name,
            fields=table.header.names,
            row_count=len(table.rows),
        )

    def get(self, row_id: str) -> MemberRecord:
        table = self._load_checked()
        row = table.find_row_by_id(row_id)
        return MemberRecord(id=row_id, row_index=row.index, values=table.record(row))

    def find(self, field_name: str, substring: str) -> list[str]:
        return self._load_checked().find_row_ids_by(field_name, substring)


class MemberRepository(TableRepository):
    """The writable members table."""

    def _commit(
        self,
        table: Table,
        change: ChangeRecord,
        *,
        dry_run: bool,
        backup: bool,
    ) -> Mutation:
        table.validate_structure()
        lines = table.to_lines()
        if dry_run:
            return Mutation(table=table, change=change, persisted=False)
        backup_path = self.storage.backup(self.filename) if backup else None
        self.storage.persist(self.filename, lines)
        self.events.emit("table.persisted", {"table": self.name, "rows": len(table.rows)})
        return Mutation(table=table, change=change, persisted=True, backup_path=backup_path)

    def add(
        self,
        row_id: str,
        value_for: ValueSource,
        *,
        dry_run: bool = False,
        backup: bool = False,
    ) -> Mutation:
        """Append a member. ``value_for`` supplies every non-id field value."""
        current = self._load_checked()
        if row_id in current.ids:
            raise DuplicateIdError(row_id)
        values = [row_id if f.is_id else value_for(f) for f in current.header.fields]
        table = current.add_row(values)
        change = ChangeRecord(
            type="member.add",
            target=f"{self.name}[{row_id}]",
            after=table.record(table.rows[-1]),
        )
        return self._commit(table, change, dry_run=dry_run, backup=backup)

    def update(
        self,
        row_id: str,
        action: FieldAction,
        field_name: str,
        value: str,
        *,
        dry_run: bool = False,
        backup: bool = False,
    ) -> Mutation:
        current = self._load_checked()
        field = current.find_field(field_name)
        old_row = current.find_row_by_id(row_id)
        before = old_row.value(field.index)
        table = current.update_field_value(row_id, action, field_name, value)
        # Look up by position: the update may have renamed the id.
        after = table.rows[old_row.index].value(field.index)
        if field.is_id and after != row_id and after in current.ids:
            raise DuplicateIdError(after)
        change = ChangeRecord(
            type=f"member.update.{action.value}",
            target=f"{self.name}[{row_id}].{field_name}",
            before=before,
            after=after,
        )
        return self._commit(table, change, dry_run=dry_run, backup=backup)

    def remove(
        self,
        row_id: str,
        *,
        dry_run: bool = False,
        backup: bool = False,
    ) -> Mutation:
        """Delete a member. Removing an unknown id changes nothing."""
        current = self._load_checked()
        before = None
        for row in current.rows:
            if current.row_id(row) == row_id:
                before = current.record(row)
                break
        table = current.remove_row_by_id(row_id)
        change = ChangeRecord(type="member.remove", target=f"{self.name}[{row_id}]", before=before)
        return self._commit(table, change, dry_run=dry_run, backup=backup)


class Directory:
    """The members, teams and titles tables of one data directory."""

    def __init__(
        self,
        storage: Storage,
        config: OrgConfig | None = None,
        events: EventEmitter | None = None,
    ) -> None:
        config = config or OrgConfig()
        self.events = events or EventEmitter()
        self.members = MemberRepository(storage, "members", config.members_file, self.events)
        self.teams = TableRepository(storage, "teams", config.teams_file, self.events)
        self.titles = TableRepository(storage, "titles", config.titles_file, self.events)

    @classmethod
    def from_config(cls, config: OrgConfig, events: EventEmitter | None = None) -> "Directory":
        return cls(FileStorage(config.data_dir), config, events)

    @property
    def repositories(self) -> dict[str, TableRepository]:
        return {"members": self.members, "teams": self.teams, "titles": self.titles}

    def reference_ids(self, kind: str) -> list[str]:
        """Live ids for a reference kind (``member``, ``team`` or ``title``)."""
        return self.repositories[f"{kind}s"].ids()

    def load_all(self) -> dict[str, tuple[str, Table]]:
        return {name: (repo.file, repo.fetch()) for name, repo in self.repositories.items()}

    def validate(self) -> ValidationResult:
        """Load all three tables first, then validate each against all id sets."""
        result = validate_dataset(self.load_all())
        self.events.emit("table.validated", {"tables": [t.name for t in result.tables]})
        return result
