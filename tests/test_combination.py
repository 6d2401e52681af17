"""
Test suite for combination module

Tests mixed-radix encoding and decoding of option selections and
per-dimension comparators.
"""

import logging
import pytest

from decimal_core.combination import CombinedIdManager, null_considered


@pytest.fixture
def manager():
    return CombinedIdManager([0, 1, 2, 3], [0, 4, 8, 12], [0, 16, 32, 48])


class TestConstruction:
    """Test manager construction"""

    def test_counts(self, manager):
        """Test combination and dimension counts"""
        assert manager.combination_count == 64
        assert manager.dimension_count == 3

    def test_rejects_empty_dimensions(self):
        """Test empty input is a contract violation"""
        with pytest.raises(ValueError, match="At least one dimension"):
            CombinedIdManager()
        with pytest.raises(ValueError, match="Empty dimension"):
            CombinedIdManager([1], [])


class TestEncodeDecode:
    """Test encode, encode_with_index and decode"""

    def test_encode(self, manager):
        """Test encoding option values"""
        assert manager.encode(1, 4, 32) == 37
        assert manager.encode(3, 0, 32) == 35

    def test_encode_partial_selection(self, manager):
        """Test missing and None components contribute nothing"""
        assert manager.encode(1) == 1
        assert manager.encode(None, 4) == 4

    def test_encode_with_index(self, manager):
        """Test encoding option indexes"""
        assert manager.encode_with_index(1, 1, 2) == 37
        assert manager.encode_with_index(3, 3, 3) == 63

    def test_decode(self, manager):
        """Test decoding back into option values"""
        assert manager.decode(37) == [1, 4, 32]
        assert manager.decode(35) == [3, 0, 32]
        assert manager.decode(0) == [0, 0, 0]

    def test_inverse_law(self, manager):
        """Test encode and decode are mutual inverses"""
        for combined_id in range(manager.combination_count):
            assert manager.encode(*manager.decode(combined_id)) == combined_id

    def test_non_numeric_options(self):
        """Test options of any type, None included"""
        manager = CombinedIdManager(["x", "y"], [None, "z"])
        assert manager.encode("y", "z") == 3
        assert manager.encode("y", None) == 1
        assert manager.decode(1) == ["y", None]

    def test_encode_errors(self, manager):
        """Test invalid selections"""
        with pytest.raises(ValueError, match="no argument"):
            manager.encode()
        with pytest.raises(ValueError, match="exceeds dimension count"):
            manager.encode(1, 4, 32, 0)
        with pytest.raises(ValueError, match="doesn't exist"):
            manager.encode(5)

    def test_encode_with_index_errors(self, manager):
        """Test invalid index selections"""
        with pytest.raises(ValueError, match="doesn't match dimension count"):
            manager.encode_with_index(1, 1)
        with pytest.raises(ValueError, match="doesn't exist"):
            manager.encode_with_index(4, 0, 0)
        with pytest.raises(ValueError):
            manager.encode_with_index(-1, 0, 0)

    def test_decode_range(self, manager):
        """Test decode validates the id range"""
        with pytest.raises(ValueError, match="less than 0"):
            manager.decode(-1)
        with pytest.raises(ValueError, match="greater than combination count"):
            manager.decode(65)


class TestComparators:
    """Test per-dimension equality predicates"""

    def test_push_comparator(self, manager):
        """Test a custom predicate replaces value equality"""
        manager.push_comparator(1, int, lambda option, candidate: option == -candidate)
        assert manager.encode(1, -4, 32) == 37
        with pytest.raises(ValueError):
            manager.encode(1, 4, 32)

    def test_push_comparator_errors(self, manager):
        """Test invalid comparator registration"""
        with pytest.raises(ValueError, match="doesn't exist"):
            manager.push_comparator(3, int, lambda a, b: a == b)
        with pytest.raises(TypeError, match="doesn't match"):
            manager.push_comparator(0, str, lambda a, b: a == b)

    def test_null_considered(self):
        """Test None handling wraps any predicate"""
        calls = []

        def predicate(option, candidate):
            calls.append((option, candidate))
            return True

        compare = null_considered(predicate)
        assert compare(None, None)
        assert not compare(None, 1)
        assert not compare(1, None)
        assert calls == []
        assert compare(1, 2)
        assert calls == [(1, 2)]


class TestCodecLogging:
    """Test structured debug records"""

    def test_construction_is_logged(self, caplog):
        """Test construction reports the combination count"""
        caplog.set_level(logging.DEBUG, logger="decimal_core.combination")
        CombinedIdManager([1, 2], [3, 4, 5])

        records = [r for r in caplog.records if getattr(r, "operation", None) == "construct"]
        assert records[-1].component == "codec"
        assert records[-1].extra == {"combination_count": 6}
