"""List query construction."""

import pytest
from sqlalchemy.dialects import sqlite

from grifo.core.pagination import PageMeta, PaginationParams
from grifo.core.query import ListQuery, end_of_day, escape_like, start_of_day
from grifo.domain import Property
from grifo.services.property import SEARCH_COLUMNS, SORT_COLUMNS


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=sqlite.dialect()))


def test_escape_like():
    assert escape_like("50%_off\\") == "50\\%\\_off\\\\"
    assert escape_like("Flores") == "Flores"


def test_search_is_bound_and_escaped():
    query = ListQuery(Property, sort_columns=SORT_COLUMNS, search_columns=SEARCH_COLUMNS)
    query.search("x' OR 1=1 --")

    compiled = query.statement.compile(dialect=sqlite.dialect())
    assert "OR 1=1" not in str(compiled)
    assert "%x' OR 1=1 --%" in compiled.params.values()


def test_page_statement_orders_with_id_tie_break():
    query = ListQuery(Property, sort_columns=SORT_COLUMNS)
    params = PaginationParams(page=3, limit=10, sort="city", order="asc")

    sql = _sql(query.page_statement(params))

    assert "ORDER BY properties.city ASC, properties.id ASC" in sql
    assert "LIMIT" in sql and "OFFSET" in sql
    assert params.offset == 20


def test_unknown_sort_column_rejected():
    query = ListQuery(Property, sort_columns=SORT_COLUMNS)
    with pytest.raises(KeyError):
        query.page_statement(PaginationParams(sort="password_hash"))


def test_equals_skips_none():
    query = ListQuery(Property, sort_columns=SORT_COLUMNS).equals(status=None, city="Recife")
    sql = _sql(query.statement)
    assert "properties.city = " in sql
    assert "properties.status" not in sql.split("WHERE")[-1]


def test_count_statement_ignores_ordering():
    query = ListQuery(Property, sort_columns=SORT_COLUMNS).equals(city="Recife")
    sql = _sql(query.count_statement())
    assert sql.startswith("SELECT count(*)")
    assert "ORDER BY" not in sql


def test_day_bounds_are_inclusive():
    from datetime import date

    day = date(2024, 3, 10)
    assert start_of_day(day).hour == 0
    end = end_of_day(day)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_pagination_params_clamp_and_blank_search():
    params = PaginationParams(limit=1000, search="   ")
    assert params.limit == 100
    assert params.search is None


def test_page_meta_pages():
    assert PageMeta.build(total=12, page=2, limit=5).pages == 3
    assert PageMeta.build(total=0, page=1, limit=20).pages == 0
