"""
Test suite for the null-propagation policy engine

Tests sums, products, quotients, remainders, percentage and tax
derivations under the Reserve-Null, Notice-Null and Wrap-Zero policies.
"""

import pytest
from decimal import Decimal

from decimal_core.parsing import parse_decimal
from decimal_core.rounding import RoundingMode
from decimal_core.policies import (
    NullPolicy, reduce_sum, reduce_product, minus, absolute,
    sum, sum_reserve_null, sum_notice_null,
    blend_sum, blend_sum_reserve_null, blend_sum_notice_null,
    product, product_reserve_null, product_notice_null,
    product_depercent, product_depercent_reserve_null, product_depercent_notice_null,
    quotient, quotient_notice_null, quotient_percent, quotient_percent_notice_null,
    mod, mod_notice_null, tax_of_inclusive, tax_of_exclusive,
    average, average_ignore_null, power, integral_part, fractional_part,
    integral_length, fractional_length
)


class TestGenericReductions:
    """Test reduce_sum and reduce_product under each policy"""

    def test_reserve_null(self):
        """Test nulls are skipped and only total absence is None"""
        assert reduce_sum([1, "A", 2], NullPolicy.RESERVE_NULL) == Decimal('3')
        assert reduce_sum(["A", None], NullPolicy.RESERVE_NULL) is None
        assert reduce_product([], NullPolicy.RESERVE_NULL) is None

    def test_notice_null(self):
        """Test a single null poisons the result"""
        assert reduce_sum([1, "A"], NullPolicy.NOTICE_NULL) is None
        assert reduce_product([2, 3], NullPolicy.NOTICE_NULL) == Decimal('6')

    def test_wrap_zero_identities(self):
        """Test empty results become the operation's identity"""
        assert reduce_sum([], NullPolicy.WRAP_ZERO) == Decimal('0')
        assert reduce_product(["A"], NullPolicy.WRAP_ZERO) == Decimal('1')

    def test_exact_arithmetic(self):
        """Test sums never round"""
        addends = ["0.1"] * 10 + ["12345678901234567890.000000000001"]
        assert reduce_sum(addends) == Decimal('12345678901234567891.000000000001')


class TestSums:
    """Test named sum variants"""

    def test_sum(self):
        """Test wrap-zero sum"""
        assert sum(20, "-35", "50") == Decimal('35')
        assert sum(20, "A35", "50") == Decimal('70')
        assert sum() == Decimal('0')
        assert sum("A") == Decimal('0')

    def test_sum_reserve_null(self):
        """Test reserve-null sum"""
        assert sum_reserve_null(None, "A35", False) is None
        assert sum_reserve_null(None, 5) == Decimal('5')

    def test_sum_notice_null(self):
        """Test notice-null sum"""
        assert sum_notice_null(1, "A") is None
        assert sum_notice_null(1, 2) == Decimal('3')

    def test_blend_sum(self):
        """Test bool operands switch the sign of what follows"""
        assert blend_sum(20, False, "-35", "50") == Decimal('5')
        assert blend_sum(False, 20, "A35", True, "50") == Decimal('30')

    def test_blend_sum_policies(self):
        """Test blend sum under reserve-null and notice-null"""
        assert blend_sum_reserve_null(True, False) is None
        assert blend_sum_reserve_null(False, "A", 3) == Decimal('-3')
        assert blend_sum_notice_null(20, False, "A") is None
        assert blend_sum_notice_null(20, False, 5) == Decimal('15')

    def test_minus_and_absolute(self):
        """Test sign operations keep None as None"""
        assert minus("3") == Decimal('-3')
        assert minus(None) is None
        assert not minus(0).is_signed()
        assert absolute("-2.5") == Decimal('2.5')
        assert absolute("x") is None


class TestProducts:
    """Test named product variants"""

    def test_product(self):
        """Test wrap-zero product"""
        assert product(2, "-3", "5") == Decimal('-30')
        assert product(2, "A3", "5") == Decimal('10')
        assert product() == Decimal('1')

    def test_product_null_policies(self):
        """Test reserve-null and notice-null products"""
        assert product_reserve_null("A") is None
        assert product_reserve_null("A", 4) == Decimal('4')
        assert product_notice_null(2, "A") is None

    def test_product_depercent(self):
        """Test percentage products are divided by 100"""
        assert product_depercent(50, 3) == Decimal('1.5')
        assert product_depercent_reserve_null("A") is None
        assert product_depercent_reserve_null(200, "A", 15) == Decimal('30')
        assert product_depercent_notice_null(200, "A") is None


class TestQuotients:
    """Test quotient and remainder variants"""

    def test_quotient(self):
        """Test quotient rounding to scale"""
        assert quotient("10", "3", 2) == Decimal('3.33')
        assert quotient("2", "3", 2, RoundingMode.DOWN) == Decimal('0.66')
        assert quotient("41", "8", 2) == Decimal('5.13')

    def test_quotient_identity_divisor(self):
        """Test an absent or zero divisor returns the dividend"""
        assert quotient(5, 0, 2) == Decimal('5.00')
        assert str(quotient(5, 0, 2)) == "5.00"
        assert quotient(5, None, 2) == Decimal('5.00')
        assert str(quotient(None, 4, 1)) == "0.0"

    def test_quotient_notice_null(self):
        """Test notice-null quotient refuses unusable operands"""
        assert quotient_notice_null(5, 0, 2) is None
        assert quotient_notice_null(None, 4, 2) is None
        assert quotient_notice_null(9, 4, 1) == Decimal('2.3')

    def test_quotient_percent(self):
        """Test percentage quotient"""
        assert quotient_percent(1, 8, 2) == Decimal('12.50')
        assert quotient_percent(1, 0, 0) == Decimal('100')
        assert quotient_percent_notice_null(1, None, 2) is None

    def test_quotient_accepts_rounding_labels(self):
        """Test rounding mode given by label"""
        assert quotient(1, 8, 2, "half_even") == Decimal('0.12')

    def test_mod(self):
        """Test remainder sign and identity divisor"""
        assert mod(17, 5) == Decimal('2')
        assert mod(-17, 5) == Decimal('-2')
        assert mod(Decimal('5.5'), 2) == Decimal('1.5')
        assert mod(17, 0) == Decimal('17')
        assert mod("A", 0) is None
        assert mod("A", 5) == Decimal('0')

    def test_mod_notice_null(self):
        """Test notice-null remainder"""
        assert mod_notice_null("A", 5) is None
        assert mod_notice_null(5, 0) is None
        assert mod_notice_null(10, 5) == Decimal('0')


class TestTax:
    """Test tax decomposition"""

    def test_tax_of_inclusive(self):
        """Test tax contained in an inclusive amount"""
        assert tax_of_inclusive(1100, "0.1", 0) == Decimal('100')
        assert tax_of_inclusive(1000, "0.08", 2) == Decimal('74.07')

    def test_tax_of_exclusive(self):
        """Test tax charged on top of an exclusive amount"""
        assert tax_of_exclusive(1000, "0.08", 0) == Decimal('80')
        assert tax_of_exclusive("99.99", "0.1", 1, RoundingMode.FLOOR) == Decimal('9.9')

    def test_tax_of_unusable_inputs(self):
        """Test zero at the requested scale for unusable inputs"""
        assert str(tax_of_inclusive(None, "0.1", 2)) == "0.00"
        assert tax_of_exclusive(1000, 0, 0) == Decimal('0')


class TestScientific:
    """Test average, power and part extraction"""

    def test_average(self):
        """Test nulls count as zero in the mean"""
        assert average(1, 2, "A") == Decimal('1')
        assert average(1, 2) == Decimal('1.5')
        assert average() == Decimal('0')

    def test_average_ignore_null(self):
        """Test nulls are left out of the mean"""
        assert average_ignore_null(1, 2, "A") == Decimal('1.5')

    def test_power(self):
        """Test integer powers"""
        assert power("1.5", 2) == Decimal('2.25')
        assert power(2, -2) == Decimal('0.25')
        assert power(3, -1) == Decimal('0.3333333333')
        assert power(None, 3) == Decimal('0')
        assert power(5, 0) == Decimal('1')

    def test_parts(self):
        """Test integral and fractional parts"""
        assert integral_part("-3.7") == Decimal('-3')
        assert fractional_part("-3.250") == Decimal('-0.25')
        assert str(fractional_part(4)) == "0.0"
        assert integral_length("123.45") == 3
        assert integral_length("0.5") == 1
        assert fractional_length("123.450") == 2
        assert fractional_length(7) == 0


def _parseable(sequence):
    return [value for value in sequence if parse_decimal(value) is not None]


MIXED_SEQUENCES = [
    (1, "A", 2),
    ("1.5", None, "-2", False),
    ("3",),
    (None, "x", "1,000", 0.25),
    (Decimal('-0.00'), "1e3", True, "abc", 7),
]

ALL_SEQUENCES = MIXED_SEQUENCES + [(), (None, "x"), (False, "NaN")]


class TestPolicyLaws:
    """Test the relationships between the three null policies"""

    @pytest.mark.parametrize("sequence", MIXED_SEQUENCES)
    def test_reserve_null_sum_is_notice_null_over_parseable(self, sequence):
        """Test skipping nulls equals summing only the parseable operands"""
        assert sum_reserve_null(*sequence) == sum_notice_null(*_parseable(sequence))

    @pytest.mark.parametrize("sequence", MIXED_SEQUENCES)
    def test_reserve_null_product_is_notice_null_over_parseable(self, sequence):
        """Test skipping nulls equals multiplying only the parseable operands"""
        assert product_reserve_null(*sequence) == product_notice_null(*_parseable(sequence))

    @pytest.mark.parametrize("sequence", ALL_SEQUENCES)
    def test_wrap_zero_sum_is_reserve_null_or_zero(self, sequence):
        """Test wrap-zero sum falls back to the additive identity"""
        reserved = sum_reserve_null(*sequence)
        assert sum(*sequence) == (Decimal('0') if reserved is None else reserved)

    @pytest.mark.parametrize("sequence", ALL_SEQUENCES)
    def test_wrap_zero_product_is_reserve_null_or_one(self, sequence):
        """Test wrap-zero product falls back to the multiplicative identity"""
        reserved = product_reserve_null(*sequence)
        assert product(*sequence) == (Decimal('1') if reserved is None else reserved)
