import pytest

from jobpost.constants import Currency
from jobpost.errors import PricingConfigError
from jobpost.payments import pricing
from jobpost.payments.pricing import check_price_table, compute_amount, price_for, price_table


def test_price_for_known_currency():
    assert price_for("USD") == 500
    assert price_for("usd") == 500
    assert price_for("INR") == 39900

def test_price_table_is_total_over_supported_currencies():
    table = price_table()
    assert set(table) == {c.value for c in Currency}
    assert all(isinstance(v, int) and v > 0 for v in table.values())

@pytest.mark.parametrize("currency", [c.value for c in Currency])
def test_compute_amount_is_linear_integer(currency):
    unit = price_for(currency)
    for n in range(0, 21):
        amount = compute_amount(n, currency)
        assert isinstance(amount, int)
        assert amount == n * unit

def test_two_posts_in_usd_cost_1000():
    assert compute_amount(2, "USD") == 1000

def test_price_table_miss_is_a_config_error(monkeypatch):
    monkeypatch.delitem(pricing.POST_PRICES, "GBP")
    with pytest.raises(PricingConfigError):
        price_for("GBP")
    with pytest.raises(PricingConfigError):
        check_price_table()

def test_unknown_currency_raises():
    with pytest.raises(PricingConfigError):
        compute_amount(1, "JPY")
