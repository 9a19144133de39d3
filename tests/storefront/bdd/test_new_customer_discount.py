"""BDD tests for new customer discount."""

from pytest_bdd import scenarios

scenarios("features/new_customer_discount.feature")
