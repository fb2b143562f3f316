from __future__ import annotations

from datetime import date

import pytest

from crmpro.errors import CustomerNotFound, ValidationError
from crmpro.models import Customer, Source
from crmpro.services.customers import (
    create_customer,
    delete_customer,
    is_stale_contact,
    months_before,
    query_customers,
    update_customer,
)


@pytest.fixture
def roster():
    return [
        Customer(
            company_name="Bakery Nord",
            source=Source.GOOGLE,
            industry="Food / Bakery",
            first_contact=date(2023, 6, 1),
            last_contact=date(2024, 2, 1),
        ),
        Customer(
            company_name="alpha Metals",
            source=Source.TRADE_SHOW,
            industry="Metal",
            first_contact=date(2023, 1, 1),
            last_contact=date(2024, 3, 1),
            reminder_date=date(2024, 4, 1),
        ),
        Customer(
            company_name="Legacy Import",
            source=Source.GOOGLE,
            industry="Metalworking",
            first_contact="Spring 2019",
            last_contact="sometime",
        ),
        Customer(
            company_name="Closed Shop",
            source=Source.GOOGLE,
            industry="Metal",
            last_contact=date(2024, 4, 1),
            inactive=True,
        ),
    ]


def _names(customers):
    return [c.company_name for c in customers]


def test_source_filter(roster):
    assert _names(query_customers(roster, source=Source.TRADE_SHOW)) == ["alpha Metals"]
    assert _names(query_customers(roster, source="Messe")) == ["alpha Metals"]
    assert _names(query_customers(roster, source="Google")) == ["Bakery Nord", "Legacy Import"]


def test_industry_filter_is_case_insensitive_substring(roster):
    assert _names(query_customers(roster, industry="METAL")) == ["alpha Metals", "Legacy Import"]
    assert _names(query_customers(roster, industry="bakery")) == ["Bakery Nord"]


def test_with_reminder_filter(roster):
    assert _names(query_customers(roster, with_reminder=True)) == ["alpha Metals"]


def test_filters_combine(roster):
    assert query_customers(roster, source="Google", with_reminder=True) == []
    assert _names(query_customers(roster, search="nord", source="Google")) == ["Bakery Nord"]


def test_inactive_view_is_exclusive(roster):
    assert _names(query_customers(roster, inactive=True)) == ["Closed Shop"]
    assert _names(query_customers(roster, inactive=True, industry="metal")) == ["Closed Shop"]


def test_sort_by_last_contact_newest_first(roster):
    assert _names(query_customers(roster)) == ["alpha Metals", "Bakery Nord", "Legacy Import"]


def test_sort_by_first_contact_newest_first(roster):
    result = query_customers(roster, sort_by="firstContact")
    assert _names(result) == ["Bakery Nord", "alpha Metals", "Legacy Import"]


def test_sort_by_company_name_ignores_case(roster):
    result = query_customers(roster, sort_by="companyName")
    assert _names(result) == ["alpha Metals", "Bakery Nord", "Legacy Import"]


def test_unknown_sort_key(roster):
    with pytest.raises(ValidationError):
        query_customers(roster, sort_by="phone")


@pytest.mark.parametrize(
    "on,expected",
    [
        (date(2024, 5, 15), date(2024, 2, 15)),
        (date(2024, 5, 31), date(2024, 2, 29)),
        (date(2023, 5, 31), date(2023, 2, 28)),
        (date(2024, 1, 10), date(2023, 10, 10)),
        (date(2024, 3, 31), date(2023, 12, 31)),
    ],
)
def test_months_before(on, expected):
    assert months_before(on, 3) == expected


def test_stale_contact_boundary():
    on = date(2024, 5, 31)
    assert not is_stale_contact(Customer(company_name="A", last_contact=date(2024, 2, 29)), on)
    assert is_stale_contact(Customer(company_name="A", last_contact=date(2024, 2, 28)), on)
    assert not is_stale_contact(Customer(company_name="A", last_contact=date(2024, 5, 30)), on)


def test_unparseable_last_contact_counts_as_stale():
    assert is_stale_contact(Customer(company_name="A", last_contact="sometime"), date(2024, 5, 31))


def test_new_customer_is_not_stale():
    assert not is_stale_contact(Customer(company_name="A"))


def test_create_update_delete(store):
    customer = create_customer(store, {"company_name": "Acme", "source": "Empfehlung"})
    assert customer.source is Source.REFERRAL

    update_customer(store, customer.id, {"phone": "123"})
    assert store.get(customer.id).phone == "123"

    delete_customer(store, customer.id)
    with pytest.raises(CustomerNotFound):
        store.get(customer.id)


def test_unknown_field_rejected(store):
    with pytest.raises(ValidationError):
        create_customer(store, {"company_name": "Acme", "colour": "red"})
    assert store.all() == []
