"""
Copy-on-write working set for one transition.

Collections are read from the base snapshot until a step replaces them; the
committed snapshot shares every untouched collection with the base.
"""

from typing import Any, Iterable

from founderstack.models.portfolio import AppState, Company


class Draft:
    def __init__(self, base: AppState):
        self._base = base
        self._changes: dict[str, tuple] = {}

    @property
    def base(self) -> AppState:
        return self._base

    def get(self, collection: str) -> tuple:
        if collection in self._changes:
            return self._changes[collection]
        return getattr(self._base, collection)

    def set(self, collection: str, records: Iterable[Any]) -> None:
        self._changes[collection] = tuple(records)

    def append(self, collection: str, record: Any) -> None:
        self.set(collection, (*self.get(collection), record))

    def touch_company(self, company_id: str, now: int) -> None:
        """Refresh a company's last_modified without ever moving it backwards."""
        companies = self.get("companies")
        updated = []
        for company in companies:
            if company.id == company_id:
                company = _touched(company, now)
            updated.append(company)
        self.set("companies", updated)

    def commit(self) -> AppState:
        if not self._changes:
            return self._base
        return self._base.model_copy(update=self._changes)


def _touched(company: Company, now: int) -> Company:
    previous = company.last_modified or 0
    return company.model_copy(update={"last_modified": max(previous, now)})
