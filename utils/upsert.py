"""
Create-if-absent keyed on a unique constraint.

Match and Conversation rows are keyed on a canonical user pair. Two requests
can race to create the same row, so creation goes through the store's own
conflict handling instead of a read-then-insert.
"""
from sqlalchemy import insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError

from utils.errors import Conflict

_DIALECT_INSERTS = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


def insert_if_absent(session, model, index_elements, values):
    """Insert ``values`` unless a row with the same key exists.

    Returns ``(row, created)``. A unique violation from a concurrent writer
    counts as "already exists".
    """
    table = model.__table__
    dialect_insert = _DIALECT_INSERTS.get(session.get_bind().dialect.name)

    if dialect_insert is not None:
        stmt = dialect_insert(table).values(**values).on_conflict_do_nothing(
            index_elements=index_elements
        )
        created = session.execute(stmt).rowcount == 1
    else:
        try:
            _insert_with_savepoint(session, table, values)
            created = True
        except Conflict:
            created = False

    key = {column: values[column] for column in index_elements}
    row = session.query(model).filter_by(**key).populate_existing().one()
    return row, created


def _insert_with_savepoint(session, table, values):
    try:
        with session.begin_nested():
            session.execute(insert(table).values(**values))
    except IntegrityError as e:
        text = str(e.orig).lower()
        if 'unique' in text or 'duplicate' in text:
            raise Conflict() from e
        raise
