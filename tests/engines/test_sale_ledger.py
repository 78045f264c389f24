"""Tests for the sale ledger engine."""

from datetime import date
from decimal import Decimal

import pytest

from lob_engines.sale_ledger import (
    Installment,
    PaymentMode,
    PaymentStatus,
    SaleLedger,
    add_installment,
    build_sale_payload,
    compute_balance,
    compute_net,
    derive_payment_status,
    remove_installment,
    update_installment,
)
from lob_kernel.domain.values import Money
from lob_kernel.exceptions import (
    CurrencyMismatchError,
    DiscountExceedsGrossError,
    InstallmentNotFoundError,
    NegativeAmountError,
    NotFoundError,
    OverpaymentError,
    ValidationError,
)


def _inr(amount) -> Money:
    return Money.of(amount, "INR")


def _installment(amount, day=10, mode=PaymentMode.CASH) -> Installment:
    return Installment(_inr(amount), date(2025, 1, day), mode)


class TestComputeNet:
    """Tests for net = gross - discount."""

    def test_net_amount(self):
        assert compute_net(_inr("10000"), _inr("1500")) == _inr("8500")

    def test_zero_discount(self):
        assert compute_net(_inr("500"), Money.zero("INR")) == _inr("500")

    def test_discount_equal_to_gross(self):
        assert compute_net(_inr("500"), _inr("500")).is_zero

    def test_discount_exceeds_gross(self):
        with pytest.raises(DiscountExceedsGrossError, match="cannot be greater") as exc_info:
            compute_net(_inr("1000"), _inr("1000.01"))
        assert exc_info.value.field == "discount"
        assert exc_info.value.code == "DISCOUNT_EXCEEDS_GROSS"

    def test_negative_gross(self):
        with pytest.raises(NegativeAmountError) as exc_info:
            compute_net(_inr("-1"), Money.zero("INR"))
        assert exc_info.value.field == "amount"

    def test_negative_discount(self):
        with pytest.raises(NegativeAmountError) as exc_info:
            compute_net(_inr("100"), _inr("-5"))
        assert exc_info.value.field == "discount"

    def test_currency_mismatch(self):
        with pytest.raises(CurrencyMismatchError):
            compute_net(_inr("100"), Money.of("5", "USD"))


class TestComputeBalance:
    """Tests for total received and balance due."""

    def test_partial_payments(self):
        """Two installments of 3000 and 2000 against a net of 8500."""
        payments = [_installment("3000"), _installment("2000", day=20)]
        balance = compute_balance(_inr("8500"), payments)
        assert balance.total_received == _inr("5000")
        assert balance.balance_due == _inr("3500")
        assert not balance.is_settled

    def test_no_payments(self):
        balance = compute_balance(_inr("8500"), [])
        assert balance.total_received.is_zero
        assert balance.balance_due == _inr("8500")

    def test_fully_paid(self):
        balance = compute_balance(_inr("100"), [_installment("60"), _installment("40")])
        assert balance.is_settled

    def test_overpayment_raises(self):
        with pytest.raises(OverpaymentError) as exc_info:
            compute_balance(_inr("100"), [_installment("60"), _installment("40.01")])
        assert exc_info.value.total_received == "100.01"
        assert exc_info.value.net_amount == "100"

    def test_payment_in_other_currency(self):
        usd = Installment(Money.of("10", "USD"), date(2025, 1, 1))
        with pytest.raises(CurrencyMismatchError):
            compute_balance(_inr("100"), [usd])


class TestInstallment:
    """Tests for the installment value object."""

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError, match="valid payment amount"):
            Installment(Money.zero("INR"), date(2025, 1, 1))

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            Installment(_inr("-10"), date(2025, 1, 1))

    def test_mode_from_string(self):
        inst = Installment(_inr("10"), date(2025, 1, 1), "upi")
        assert inst.mode is PaymentMode.UPI

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Installment(_inr("10"), date(2025, 1, 1), "barter")
        assert exc_info.value.field == "mode_of_payment"


class TestInstallmentSequence:
    """Add / remove / update return new tuples and leave the input alone."""

    def setup_method(self):
        self.payments = (_installment("100"), _installment("200"), _installment("300"))

    def test_add(self):
        result = add_installment(self.payments, _installment("400"))
        assert len(result) == 4
        assert len(self.payments) == 3

    def test_remove_keeps_order(self):
        result = remove_installment(self.payments, 1)
        assert [p.amount for p in result] == [_inr("100"), _inr("300")]

    def test_update(self):
        result = update_installment(self.payments, 0, _installment("150"))
        assert result[0].amount == _inr("150")
        assert self.payments[0].amount == _inr("100")

    def test_remove_out_of_range(self):
        with pytest.raises(InstallmentNotFoundError) as exc_info:
            remove_installment(self.payments, 3)
        assert exc_info.value.index == 3
        assert exc_info.value.count == 3

    def test_negative_index_not_found(self):
        """Negative indices are not Python-style offsets here."""
        with pytest.raises(NotFoundError):
            update_installment(self.payments, -1, _installment("1"))

    def test_remove_from_empty(self):
        with pytest.raises(InstallmentNotFoundError):
            remove_installment((), 0)


class TestSaleLedger:
    """Tests for the immutable sale aggregate."""

    def test_sale_scenario(self):
        """Gross 10000, discount 1500, installments 3000 + 2000."""
        ledger = SaleLedger(gross_amount=_inr("10000"), discount=_inr("1500"))
        ledger = ledger.with_installment(_installment("3000"))
        ledger = ledger.with_installment(_installment("2000", day=20))

        assert ledger.net_amount == _inr("8500")
        assert ledger.total_received == _inr("5000")
        assert ledger.balance_due == _inr("3500")
        assert ledger.payment_status is PaymentStatus.PENDING

    def test_removing_installment_restores_balance(self):
        ledger = SaleLedger(
            gross_amount=_inr("10000"),
            discount=_inr("1500"),
            payments=[_installment("3000"), _installment("2000")],
        )
        ledger = ledger.without_installment(1)
        assert ledger.balance_due == _inr("5500")

    def test_construction_rejects_excess_discount(self):
        with pytest.raises(DiscountExceedsGrossError):
            SaleLedger(gross_amount=_inr("100"), discount=_inr("200"))

    def test_construction_rejects_foreign_installment(self):
        with pytest.raises(CurrencyMismatchError):
            SaleLedger(
                gross_amount=_inr("100"),
                discount=Money.zero("INR"),
                payments=[Installment(Money.of("1", "USD"), date(2025, 1, 1))],
            )

    def test_overpaid_balance_clamped(self):
        ledger = SaleLedger(
            gross_amount=_inr("100"),
            discount=Money.zero("INR"),
            payments=[_installment("150")],
        )
        assert ledger.is_overpaid
        assert ledger.balance_due.is_zero
        with pytest.raises(OverpaymentError):
            ledger.validate()

    def test_validate_returns_balance(self):
        ledger = SaleLedger(_inr("100"), _inr("10"), [_installment("50")])
        assert ledger.validate().balance_due == _inr("40")

    def test_with_updated_installment(self):
        ledger = SaleLedger(_inr("100"), Money.zero("INR"), [_installment("50")])
        ledger = ledger.with_updated_installment(0, _installment("100"))
        assert ledger.payment_status is PaymentStatus.COMPLETED

    def test_currency(self):
        assert SaleLedger(_inr("1"), _inr("0")).currency == "INR"


class TestPaymentStatus:
    def test_not_yet(self):
        assert derive_payment_status(SaleLedger(_inr("100"), _inr("0"))) is PaymentStatus.NOT_YET

    def test_completed(self):
        ledger = SaleLedger(_inr("100"), _inr("0"), [_installment("100")])
        assert derive_payment_status(ledger) is PaymentStatus.COMPLETED

    def test_zero_net_with_no_payments_is_not_yet(self):
        assert SaleLedger(_inr("100"), _inr("100")).payment_status is PaymentStatus.NOT_YET


class TestBuildSalePayload:
    """Tests for the REST request body."""

    def setup_method(self):
        self.ledger = SaleLedger(
            gross_amount=_inr("10000"),
            discount=_inr("1500"),
            payments=[
                _installment("3000", mode=PaymentMode.UPI),
                _installment("2000", day=20),
            ],
        )

    def test_payload_shape(self):
        payload = build_sale_payload(self.ledger, event_id=7, sale_date=date(2025, 1, 5))
        assert payload["event"] == 7
        assert payload["amount"] == "10000.00"
        assert payload["discount"] == "1500.00"
        assert payload["date"] == "2025-01-05"
        assert payload["payment_status"] == "pending"
        assert payload["payments"][0] == {
            "payment_amount": "3000.00",
            "payment_date": "2025-01-10",
            "mode_of_payment": "upi",
            "notes": "",
        }
        assert len(payload["payments"]) == 2

    def test_explicit_status_overrides(self):
        payload = build_sale_payload(self.ledger, 7, date(2025, 1, 5), payment_status="completed")
        assert payload["payment_status"] == "completed"

    def test_zero_amount_rejected(self):
        ledger = SaleLedger(gross_amount=Money.zero("INR"), discount=Money.zero("INR"))
        with pytest.raises(ValidationError, match="greater than 0") as exc_info:
            build_sale_payload(ledger, 7, date(2025, 1, 5))
        assert exc_info.value.field == "amount"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_sale_payload(self.ledger, 7, date(2025, 1, 5), payment_status="maybe")
        assert exc_info.value.field == "payment_status"

    def test_no_payments_key_when_empty(self):
        payload = build_sale_payload(SaleLedger(_inr("10"), _inr("0")), 1, date(2025, 1, 1))
        assert "payments" not in payload
        assert payload["payment_status"] == "not_yet"

    def test_overpaid_ledger_not_serialized(self):
        ledger = SaleLedger(_inr("10"), _inr("0"), [_installment("11")])
        with pytest.raises(OverpaymentError):
            build_sale_payload(ledger, 1, date(2025, 1, 1))

    def test_amount_rounded_for_wire(self):
        ledger = SaleLedger(_inr("10.005"), _inr("0"))
        assert build_sale_payload(ledger, 1, date(2025, 1, 1))["amount"] == "10.01"
