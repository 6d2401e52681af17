"""
Combinatorial Identifier Codec Module

Maps a selection of one option per dimension to a single integer and back,
using mixed-radix positional weights (least-significant dimension first).
Each dimension matches selections with its own equality predicate.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

from .logging_config import log_operation

logger = logging.getLogger(__name__)

Comparator = Callable[[Any, Any], bool]


def _default_equality(option: Any, candidate: Any) -> bool:
    return option == candidate


def null_considered(predicate: Optional[Comparator] = None) -> Comparator:
    """
    Wrap an equality predicate so that None equals only None.

    The wrapped predicate is called only when both arguments are present.
    """
    equality = predicate or _default_equality

    def compare(option: Any, candidate: Any) -> bool:
        if option is None and candidate is None:
            return True
        if option is None or candidate is None:
            return False
        return bool(equality(option, candidate))

    return compare


class CombinedIdManager:
    """
    Encodes one option per dimension into a unique combined id.

    Example:
        >>> manager = CombinedIdManager([0, 1, 2, 3], [0, 4, 8, 12], [0, 16, 32, 48])
        >>> manager.encode(1, 4, 32)
        37
        >>> manager.decode(37)
        [1, 4, 32]

    Not thread-safe: register comparators before sharing an instance.
    """

    def __init__(self, *dimensions: Sequence):
        if not dimensions:
            raise ValueError("At least one dimension is required")
        if any(dimension is None or len(dimension) == 0 for dimension in dimensions):
            raise ValueError("Empty dimension is not permitted")

        self._weighted_options: List[Dict[int, Any]] = []
        self._comparators: List[Comparator] = []

        unit_weight = 1
        for dimension in dimensions:
            options = list(dimension)
            self._weighted_options.append(
                {index * unit_weight: option for index, option in enumerate(options)}
            )
            self._comparators.append(null_considered())
            unit_weight *= len(options)
        self._combination_count = unit_weight

        log_operation(
            logger, "debug", f"Created combined id manager with {len(dimensions)} dimensions",
            operation="construct", component="codec",
            extra={"combination_count": self._combination_count}
        )

    @property
    def combination_count(self) -> int:
        """Product of all dimension sizes"""
        return self._combination_count

    @property
    def dimension_count(self) -> int:
        return len(self._weighted_options)

    def push_comparator(self, dimension_index: int, option_type: type, predicate: Comparator) -> None:
        """
        Replace the equality predicate of one dimension.

        Args:
            dimension_index: Position of the dimension given at construction
            option_type: Type the dimension's options are expected to have
            predicate: Called as predicate(option, candidate); None handling
                is applied around it

        Raises:
            ValueError: If the dimension does not exist
            TypeError: If the dimension's options are not of option_type
        """
        if dimension_index < 0 or dimension_index >= self.dimension_count:
            raise ValueError(f"Dimension index {dimension_index} doesn't exist")
        first_option = next(iter(self._weighted_options[dimension_index].values()))
        if not isinstance(first_option, option_type):
            raise TypeError(
                f"Comparator type {option_type.__name__} doesn't match "
                f"option type {type(first_option).__name__}"
            )
        self._comparators[dimension_index] = null_considered(predicate)
        log_operation(
            logger, "debug", f"Pushed comparator for dimension {dimension_index}",
            operation="push_comparator", component="codec"
        )

    def encode_with_index(self, *indexes: int) -> int:
        """
        Encode a selection given as zero-based option indexes.

        Raises:
            ValueError: If the index count differs from the dimension count
                or an index is out of range
        """
        if not indexes:
            raise ValueError("Invoking with no argument is not permitted")
        if len(indexes) != self.dimension_count:
            raise ValueError(
                f"Index count {len(indexes)} doesn't match dimension count {self.dimension_count}"
            )

        combined_id = 0
        for dimension_index, index in enumerate(indexes):
            weights = sorted(self._weighted_options[dimension_index])
            if index < 0 or index >= len(weights):
                raise ValueError(f"Index {index} ({dimension_index}) doesn't exist")
            combined_id += weights[index]
        return combined_id

    def encode(self, *selection: Any) -> int:
        """
        Encode a selection given as option values.

        Missing trailing components and None components contribute nothing.

        Raises:
            ValueError: If there are more components than dimensions or a
                component matches no option of its dimension
        """
        if not selection:
            raise ValueError("Invoking with no argument is not permitted")
        if len(selection) > self.dimension_count:
            raise ValueError(
                f"Component count {len(selection)} exceeds dimension count {self.dimension_count}"
            )

        combined_id = 0
        for dimension_index, component in enumerate(selection):
            if component is None:
                continue
            comparator = self._comparators[dimension_index]
            for weight, option in self._weighted_options[dimension_index].items():
                if comparator(option, component):
                    combined_id += weight
                    break
            else:
                raise ValueError(f"Component {component!r} ({dimension_index}) doesn't exist")
        return combined_id

    def decode(self, combined_id: int) -> List[Any]:
        """
        Decode a combined id back into one option per dimension.

        Raises:
            ValueError: If the id is negative or exceeds the combination count
        """
        if combined_id < 0:
            raise ValueError("Combined id should not be less than 0")
        if combined_id > self._combination_count:
            raise ValueError(
                f"Combined id should not be greater than combination count: {self._combination_count}"
            )

        selection = []
        remainder = combined_id
        for weighted_options in reversed(self._weighted_options):
            weight = max(w for w in weighted_options if w <= remainder)
            selection.append(weighted_options[weight])
            remainder -= weight
        selection.reverse()
        return selection
