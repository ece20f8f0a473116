import numpy as np
import pytest
import scipy.sparse as sp

from graphdata.check import (
    check_edges,
    check_if_label,
    check_label,
    check_nodes,
    check_refs_if_list,
    check_size,
    check_size_if_matrix,
    check_size_if_vector,
    check_template,
    check_template_if_sparse,
)
from graphdata.containers import Adjacency, Map
from graphdata.errors import (
    LabelError,
    SchemaError,
    SizeMismatchError,
    TemplateViolationError,
    ValueCheckError,
)
from graphdata.sparse import SparseVector, sparse_matrix


def _node_template() -> SparseVector:
    # Stored positions 2, 3 and 5, with a stored zero at 3.
    return SparseVector(5, [1, 2, 4], [1.0, 0.0, 1.0])


def test_size_mismatch_reports_both_shapes() -> None:
    with pytest.raises(SizeMismatchError) as exc:
        check_size("mass", np.array([1.0, 2.0]), 3)

    message = str(exc.value)
    assert "'mass'" in message
    assert "expected (3,), got (2,)" in message


def test_size_wildcard_dimension() -> None:
    check_size("rates", np.zeros((2, 3)), (None, 3))

    with pytest.raises(SizeMismatchError) as exc:
        check_size("rates", np.zeros((2, 3)), (None, 4))

    assert "expected (Any, 4), got (2, 3)" in str(exc.value)


def test_size_of_sparse_values() -> None:
    check_size("mass", SparseVector(4), 4)
    check_size("rates", sp.csc_matrix((2, 3)), (2, 3))


def test_template_rejects_position_outside() -> None:
    value = SparseVector(5, [3], [7.0])

    with pytest.raises(TemplateViolationError) as exc:
        check_template("growth", value, _node_template(), "producers")

    message = str(exc.value)
    assert "node index [4] (7.0)" in message
    assert "'producers'" in message
    assert "[2, 3, 5]" in message


def test_template_stored_zero_allows_data() -> None:
    check_template("growth", SparseVector(5, [2], [1.0]), _node_template(), "producers")


def test_stored_zero_value_outside_template_fails() -> None:
    with pytest.raises(TemplateViolationError) as exc:
        check_template("growth", SparseVector(5, [0], [0.0]), _node_template(), "producers")

    assert "node index [1] (0.0)" in str(exc.value)


def test_matrix_template() -> None:
    template = sparse_matrix((2, 2), [(0, 1)], [1.0], float)
    check_template("rates", sparse_matrix((2, 2), [(0, 1)], [5.0], float), template, "links")

    with pytest.raises(TemplateViolationError) as exc:
        check_template("rates", sparse_matrix((2, 2), [(1, 0)], [5.0], float), template, "links")

    message = str(exc.value)
    assert "edge index [2, 1] (5.0)" in message
    assert "[(1, 2)]" in message


def test_template_size_is_checked_first() -> None:
    with pytest.raises(SizeMismatchError):
        check_template("growth", SparseVector(4), _node_template(), "producers")


def test_labels() -> None:
    check_label("response", "linear", ["linear", "classic"])

    with pytest.raises(LabelError) as exc:
        check_label("response", "bad", ["linear", "classic"])

    message = str(exc.value)
    assert "Invalid label received for 'response': 'bad'." in message
    assert "Expected either 'linear' or 'classic' instead." in message


def test_conditional_checks_skip_other_shapes() -> None:
    assert not check_if_label("response", 1.0, ["linear"])
    assert not check_size_if_vector("mass", 1.0, 3)
    assert not check_size_if_matrix("mass", np.zeros(3), (3, 3))
    assert not check_template_if_sparse("mass", np.zeros(5), _node_template(), "species")
    assert not check_refs_if_list("mass", np.zeros(5), "species", space=5)

    assert check_size_if_vector("mass", np.zeros(3), 3)
    with pytest.raises(SizeMismatchError):
        check_size_if_matrix("rates", np.zeros((3, 2)), (3, 3))


def test_node_values() -> None:
    positive = lambda value: value > 0  # noqa: E731

    check_nodes("mass", 2.0, positive, "Expected a positive value.")
    check_nodes("mass", Map("label", float, [("a", 1.0)]), positive, "")

    with pytest.raises(ValueCheckError) as exc:
        check_nodes("mass", np.array([1.0, -2.0]), positive, "Expected a positive value.")
    assert (
        "Invalid value for 'mass' at node 2: -2.0. Expected a positive value."
        in str(exc.value)
    )

    with pytest.raises(ValueCheckError) as exc:
        check_nodes("mass", -1.0, positive, "Expected a positive value.")
    assert "Invalid value for 'mass': -1.0." in str(exc.value)


def test_missing_sparse_entries_are_not_checked() -> None:
    check_nodes("mass", SparseVector(3, [1], [2.0]), lambda value: value > 0, "")


def test_edge_values() -> None:
    adjacency = Adjacency("index", float, [(1, Map("index", float, [(5, -1.0)]))])

    with pytest.raises(ValueCheckError) as exc:
        check_edges("rates", adjacency, lambda value: value >= 0, "Expected non-negative rates.")

    assert "at edge (1, 5): -1.0" in str(exc.value)

    with pytest.raises(SchemaError):
        check_edges("rates", np.zeros(3), lambda value: True, "")
