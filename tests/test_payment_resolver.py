from __future__ import annotations

from decimal import Decimal

import pytest

from bookflow.application.exceptions import InvalidAmountError, ValidationError
from bookflow.application.use_cases.payment_resolver import resolve
from bookflow.domain.entities.payment import PaymentMethod, PaymentStatus
from bookflow.domain.entities.wizard_state import WizardStep

from conftest import walk_to_summary


def test_cash_resolves_to_direct_unpaid():
    resolution = resolve("cash", "190")
    assert resolution.method is PaymentMethod.cash
    assert resolution.requires_redirect is False
    assert resolution.payment_status is PaymentStatus.unpaid
    assert resolution.amount == Decimal("190.00")


def test_card_resolves_to_redirect():
    resolution = resolve(PaymentMethod.card, 195.0)
    assert resolution.requires_redirect is True
    assert resolution.payment_status is None


@pytest.mark.parametrize("amount", [None, "", "0", -5, "abc", "NaN"])
def test_bad_amounts_are_rejected(amount):
    with pytest.raises(InvalidAmountError):
        resolve("card", amount)


def test_unknown_method_is_rejected():
    with pytest.raises(ValidationError):
        resolve("crypto", "10")


def test_cash_never_creates_a_checkout_session(make_wizard, payments):
    wizard = make_wizard()
    walk_to_summary(wizard, "cash", "20")
    wizard.confirm()
    assert payments.calls == []


def test_card_always_creates_a_checkout_session(make_wizard, payments):
    wizard = make_wizard()
    walk_to_summary(wizard, "card")
    wizard.confirm()
    assert len(payments.calls) == 1
    assert wizard.step is WizardStep.submitting
