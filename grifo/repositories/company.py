"""Company (tenant) repository."""

from typing import Any

from grifo.domain.company import Company
from grifo.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    """Companies are scoped by their own id instead of a company_id column."""

    model = Company

    def _scope(self) -> list[Any]:
        clauses: list[Any] = [Company.deleted_at.is_(None)]
        if self._company_id is not None:
            clauses.append(Company.id == self._company_id)
        return clauses
