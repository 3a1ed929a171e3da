"""Operations on a transaction's embedded activity and document lists

These work on a record already loaded into memory; persisting the result is
the caller's job.
"""
from typing import Callable, List, TypeVar, Union

from transactions_service.exceptions import ConflictError, NotFoundError
from transactions_service.schemas.transaction import ActivityEntry, DocumentRef

Entry = TypeVar("Entry", bound=Union[ActivityEntry, DocumentRef])


def append_entry(entries: List[Entry], entry: Entry, at_front: bool = False) -> Entry:
    """Insert a freshly built entry at the front (activities) or the end (documents)"""
    if any(existing.id == entry.id for existing in entries):
        raise ConflictError(
            message=f"Entry with ID {entry.id} already exists",
            details={"id": entry.id}
        )
    if at_front:
        entries.insert(0, entry)
    else:
        entries.append(entry)
    return entry


def index_of(entries: List[Entry], entry_id: str, kind: str) -> int:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    raise NotFoundError.for_resource(kind, entry_id)


def remove_by_id(entries: List[Entry], entry_id: str, kind: str) -> Entry:
    """Remove an entry by id, keeping the order of the rest"""
    return entries.pop(index_of(entries, entry_id, kind))


def find_and_mutate(entries: List[Entry], entry_id: str, fn: Callable[[Entry], None], kind: str) -> Entry:
    """Apply ``fn`` to the entry with the given id and nothing else"""
    entry = entries[index_of(entries, entry_id, kind)]
    fn(entry)
    return entry


def increment_likes(activity: ActivityEntry) -> None:
    activity.likes += 1
