import pytest

from conftest import as_order_create, digital_payload, physical_payload
from payment_methods import create_payment_strategy
from services.order_processing.errors import OrderValidationError
from services.order_processing.validation import OrderValidator, resolve_country


@pytest.fixture
def validator():
    return OrderValidator(create_payment_strategy)


def test_valid_orders_pass(validator):
    validator.validate(as_order_create(physical_payload()))
    validator.validate(as_order_create(digital_payload()))


def test_every_problem_is_reported(validator):
    payload = physical_payload(
        items=[{"sku": "A", "quantity": 0, "unit_price": "-1"}],
        customer={"name": "Jane", "email": "not-an-email"},
        shipping_address=None,
    )
    with pytest.raises(OrderValidationError) as excinfo:
        validator.validate(as_order_create(payload))

    problems = excinfo.value.problems
    assert len(problems) == 4
    assert any("quantity" in problem for problem in problems)
    assert any("unit price" in problem for problem in problems)
    assert any("email" in problem for problem in problems)
    assert any("shipping address" in problem for problem in problems)


def test_empty_order_is_rejected(validator):
    with pytest.raises(OrderValidationError, match="at least one item"):
        validator.validate(as_order_create(digital_payload(items=[])))


def test_unknown_shipping_country(validator):
    payload = physical_payload()
    payload["shipping_address"] = dict(payload["shipping_address"], country_code="XX")
    with pytest.raises(OrderValidationError, match="shipping country"):
        validator.validate(as_order_create(payload))


def test_unsupported_payment_method(validator):
    payload = digital_payload(payment={"method": "barter", "details": {}})
    with pytest.raises(OrderValidationError, match="not supported"):
        validator.validate(as_order_create(payload))


def test_cash_on_delivery_needs_a_physical_order(validator):
    payload = digital_payload(payment={"method": "cash_on_delivery", "details": {}})
    with pytest.raises(OrderValidationError, match="only available for physical orders"):
        validator.validate(as_order_create(payload))


def test_resolve_country_accepts_alpha2_and_alpha3():
    assert resolve_country("pl").name == "Poland"
    assert resolve_country("UKR").alpha_2 == "UA"
    assert resolve_country("") is None


def test_discount_problems_are_reported_with_the_rest(validator):
    payload = digital_payload(
        customer={"name": "Sam", "email": "nope"},
        discount={"type": "percentage", "percent": "NaN"},
    )
    with pytest.raises(OrderValidationError) as excinfo:
        validator.validate(as_order_create(payload))

    problems = excinfo.value.problems
    assert len(problems) == 2
    assert any("email" in problem for problem in problems)
    assert any("finite" in problem for problem in problems)
