"""
Hypothesis property tests for the calculation engines.

Properties checked:
- Sale: net + discount == gross; received + balance == net when not overpaid
- Invoice: total == subtotal + tax; CGST + SGST == tax to the minor unit
- Leave: consumed days ignore order and duplicates
- Active days: expanded range is ascending and unique with days_between + 1 days
- Display: formatting never changes the rounded value
"""

from datetime import date, timedelta
from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from lob_engines.active_days import days_between, diff, expand_range
from lob_engines.invoice_ledger import add_item, compute_totals, split_gst
from lob_engines.leave_accrual import ShiftType, expand_selection
from lob_engines.sale_ledger import Installment, SaleLedger, compute_balance, compute_net
from lob_kernel.domain.values import Money, to_display_string

amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("99999999.99"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)
positive_amounts = amounts.filter(lambda d: d > 0)
rates = st.decimals(min_value=Decimal("0"), max_value=Decimal("100"), places=2)
half_rates = st.decimals(min_value=Decimal("0"), max_value=Decimal("50"), places=2)
days = st.dates(min_value=date(2000, 1, 1), max_value=date(2100, 12, 31))

_settings = settings(max_examples=200, suppress_health_check=[HealthCheck.too_slow])


class TestSaleProperties:
    @_settings
    @given(net=amounts, discount=amounts)
    def test_net_plus_discount_is_gross(self, net, discount):
        gross = net + discount
        result = compute_net(Money.of(gross, "INR"), Money.of(discount, "INR"))
        assert result.amount + discount == gross
        assert not result.is_negative

    @_settings
    @given(parts=st.lists(positive_amounts, max_size=10), slack=amounts)
    def test_received_plus_balance_is_net(self, parts, slack):
        net = Money.of(sum(parts, Decimal("0")) + slack, "INR")
        payments = [Installment(Money.of(p, "INR"), date(2025, 1, 1)) for p in parts]
        balance = compute_balance(net, payments)
        assert balance.total_received + balance.balance_due == net
        assert balance.is_settled == (slack == 0)

    @_settings
    @given(parts=st.lists(positive_amounts, min_size=1, max_size=10), net=amounts)
    def test_ledger_balance_due_never_negative(self, parts, net):
        ledger = SaleLedger(
            gross_amount=Money.of(net, "INR"),
            discount=Money.zero("INR"),
            payments=[Installment(Money.of(p, "INR"), date(2025, 1, 1)) for p in parts],
        )
        expected = max(Decimal("0"), net - sum(parts, Decimal("0")))
        assert ledger.balance_due.amount == expected


class TestInvoiceProperties:
    @_settings
    @given(
        lines=st.lists(st.tuples(st.integers(min_value=1, max_value=100), amounts), max_size=50),
        rate=rates,
    )
    def test_total_is_subtotal_plus_tax(self, lines, rate):
        items = ()
        for qty, price in lines:
            items = add_item(items, "line", qty, Money.of(price, "INR"))
        totals = compute_totals(items, rate)
        assert totals.total == totals.subtotal + totals.tax_amount
        assert totals.tax_amount.amount == totals.subtotal.amount * rate / 100

    @_settings
    @given(tax=amounts)
    def test_gst_parts_sum_to_tax(self, tax):
        split = split_gst(Money.of(tax, "INR"))
        assert split.cgst + split.sgst == Money.of(tax, "INR")
        assert split.cgst.amount - split.sgst.amount in (Decimal("0"), Decimal("0.01"))

    @_settings
    @given(tax=amounts, cgst=half_rates, sgst=half_rates)
    def test_rate_split_sums_to_tax(self, tax, cgst, sgst):
        split = split_gst(Money.of(tax, "INR"), cgst, sgst)
        assert split.cgst + split.sgst == Money.of(tax, "INR")
        assert not split.cgst.is_negative
        assert not split.sgst.is_negative


class TestLeaveProperties:
    @_settings
    @given(selection=st.lists(days, max_size=30), shift=st.sampled_from(list(ShiftType)))
    def test_order_and_duplicates_ignored(self, selection, shift):
        shuffled = list(reversed(selection)) + selection
        assert expand_selection(shuffled, shift) == expand_selection(selection, shift)
        assert expand_selection(selection, shift) == len(set(selection)) * shift.fraction


class TestActiveDayProperties:
    @_settings
    @given(start=days, span=st.integers(min_value=0, max_value=400))
    def test_range_length(self, start, span):
        end = start + timedelta(days=span)
        expanded = expand_range(start, end)
        assert len(expanded) == days_between(start, end) + 1
        assert expanded[0] == start
        assert expanded[-1] == end
        assert len(set(expanded)) == len(expanded)
        assert list(expanded) == sorted(expanded)

    @_settings
    @given(old=st.sets(days, max_size=20), new=st.sets(days, max_size=20))
    def test_diff_applies(self, old, new):
        change = diff(old, new)
        assert (old | change.added) - change.removed == new


class TestDisplayProperties:
    @_settings
    @given(amount=amounts)
    def test_display_round_trips_digits(self, amount):
        text = to_display_string(Money.of(amount, "INR"))
        assert text.startswith("₹")
        assert Decimal(text[1:].replace(",", "")) == amount
