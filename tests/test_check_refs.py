import pytest

from graphdata.check import check_list_refs
from graphdata.containers import refspace
from graphdata.convert import convert
from graphdata.errors import (
    MissingReferenceError,
    ReferenceNotInTemplateError,
    ReferenceOutOfSpaceError,
    SchemaError,
    UnsupportedCheckError,
)
from graphdata.spaces import Labeled
from graphdata.sparse import SparseVector, sparse_matrix
from graphdata.types import BINARY


def _map(value, dtype=float):
    return convert(value, "K", dtype)


def _adjacency(value, dtype=float):
    return convert(value, "A", dtype)


def test_dense_map_names_one_missing_reference() -> None:
    values = _map({1: 5, 5: 8})
    check_list_refs("mass", values, "species", space=5)

    with pytest.raises(MissingReferenceError) as exc:
        check_list_refs("mass", values, "species", space=5, dense=True)

    message = str(exc.value)
    assert "Missing 'species' node index in 'mass'" in message
    assert any(f"no value specified for {i}." in message for i in (2, 3, 4))
    assert exc.value.context["reference"] in (2, 3, 4)


def test_adjacency_against_edge_space() -> None:
    rates = _adjacency({1: {5: 100}, 3: {1: 200}})
    check_list_refs("rates", rates, "trophic link", space=(3, 5))

    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("rates", rates, "trophic link", space=(2, 5))

    message = str(exc.value)
    assert "Invalid 'trophic link' edge index in 'rates'." in message
    assert "Index 3 does not fall within the valid range 1..2." in message


def test_adjacency_target_out_of_space() -> None:
    rates = _adjacency({1: {5: 100}})

    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("rates", rates, "trophic link", space=(3, 4))

    assert "Index 5 does not fall within the valid range 1..4." in str(exc.value)


def test_single_space_is_reused_for_both_ends() -> None:
    rates = _adjacency({1: {3: 1.0}})
    check_list_refs("rates", rates, "trophic link", space=3)

    with pytest.raises(ReferenceOutOfSpaceError):
        check_list_refs("rates", rates, "trophic link", space=2)


def test_map_against_own_and_smaller_space() -> None:
    values = _map({1: 1.0, 4: 2.0})
    check_list_refs("mass", values, "species", space=refspace(values))

    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("mass", values, "species", space=3)

    assert "Index 4" in str(exc.value)


def test_labeled_map_against_own_and_smaller_space() -> None:
    values = _map({"wolf": 1.0, "deer": 2.0})
    check_list_refs("mass", values, "species", space=refspace(values))

    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("mass", values, "species", space=["wolf", "grass"])

    message = str(exc.value)
    assert "Invalid 'species' node label in 'mass'." in message
    assert "Expected either 'grass' or 'wolf', got instead: 'deer'." in message


def test_labels_need_an_index() -> None:
    values = _map({"wolf": 1.0})

    with pytest.raises(SchemaError) as exc:
        check_list_refs("mass", values, "species", space=3)
    assert "invalid to check label references" in str(exc.value)

    with pytest.raises(SchemaError) as exc:
        check_list_refs("mass", values, "species", template=SparseVector(3))
    assert "No index provided" in str(exc.value)


def test_index_list_accepts_labeled_space_by_length() -> None:
    values = _map({1: 1.0, 3: 2.0})

    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("mass", values, "species", space=Labeled(("a", "b")))

    assert "valid range 1..2" in str(exc.value)


def test_space_is_inferred_from_template() -> None:
    template = SparseVector(5, [1, 2, 4], [1.0, 1.0, 1.0])
    values = _map({2: 1.0, 4: 1.0})

    with pytest.raises(ReferenceNotInTemplateError) as exc:
        check_list_refs("mass", values, "species", template=template)

    message = str(exc.value)
    assert "Invalid 'species' node index in 'mass': 4." in message
    assert "Valid nodes indices for this template are:\n  [2, 3, 5]" in message


def test_space_or_template_is_required() -> None:
    with pytest.raises(SchemaError) as exc:
        check_list_refs("mass", _map({1: 1.0}), "species")

    assert "Cannot infer reference space" in str(exc.value)


def test_inconsistent_template_and_space() -> None:
    with pytest.raises(SchemaError) as exc:
        check_list_refs("mass", _map({1: 1.0}), "species", space=4, template=SparseVector(5))

    assert "Inconsistent template size (5,) vs. reference space (4,)." in str(exc.value)


def test_empty_space_with_data() -> None:
    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("mass", _map({1: 1.0}), "species", space=0)

    assert (
        "No possible valid node index in 'mass' like 1: "
        "the reference space for 'species' is empty." in str(exc.value)
    )


def test_labeled_template_lists_valid_labels() -> None:
    space = Labeled(("a", "b", "c"))
    template = SparseVector(3, [0, 2], [1.0, 1.0])

    with pytest.raises(ReferenceNotInTemplateError) as exc:
        check_list_refs("mass", _map({"b": 1.0}), "species", space=space, template=template)

    assert "Valid nodes labels for this template are:\n  ['a', 'c']" in str(exc.value)


def test_adjacency_template_reports_valid_targets() -> None:
    template = sparse_matrix((3, 3), [(0, 1), (0, 2)], [1.0, 1.0], float)

    check_list_refs("rates", _adjacency({1: {3: 1.0}}), "trophic link", template=template)

    with pytest.raises(ReferenceNotInTemplateError) as exc:
        check_list_refs("rates", _adjacency({1: {1: 1.0}}), "trophic link", template=template)
    assert (
        "Valid edges target indices for source 1 in this template are:\n  [2, 3]"
        in str(exc.value)
    )

    with pytest.raises(ReferenceNotInTemplateError) as exc:
        check_list_refs("rates", _adjacency({2: {1: 1.0}}), "trophic link", template=template)
    assert "This template allows no valid edge targets indices for source 2." in str(
        exc.value
    )


def test_dense_map_against_template() -> None:
    template = SparseVector(5, [1, 2, 4], [1.0, 0.0, 1.0])
    check_list_refs(
        "mass", _map({2: 1.0, 3: 1.0, 5: 1.0}), "species", template=template, dense=True
    )

    with pytest.raises(MissingReferenceError) as exc:
        check_list_refs("mass", _map({2: 1.0, 5: 1.0}), "species", template=template, dense=True)

    assert "no value specified for 3." in str(exc.value)


def test_dense_adjacency_against_template_is_unsupported() -> None:
    template = sparse_matrix((2, 2), [(0, 1)], [1.0], float)

    with pytest.raises(UnsupportedCheckError) as exc:
        check_list_refs(
            "rates", _adjacency({1: {2: 1.0}}), "trophic link", template=template, dense=True
        )

    assert isinstance(exc.value, NotImplementedError)


def test_dense_adjacency_over_edge_space() -> None:
    full = {1: {1: 1.0, 2: 1.0}, 2: {1: 1.0, 2: 1.0}}
    check_list_refs("rates", _adjacency(full), "trophic link", space=2, dense=True)

    del full[2][2]
    with pytest.raises(MissingReferenceError) as exc:
        check_list_refs("rates", _adjacency(full), "trophic link", space=2, dense=True)

    assert "no value specified for (2, 2)." in str(exc.value)


def test_dense_binary_lists_are_a_usage_error() -> None:
    with pytest.raises(SchemaError) as exc:
        check_list_refs("producers", convert([1], "K", BINARY), "species", space=3, dense=True)

    assert "binary" in str(exc.value)


def test_empty_adjacency_rows_are_checked() -> None:
    links = convert({4: []}, "A", BINARY)

    with pytest.raises(ReferenceOutOfSpaceError) as exc:
        check_list_refs("links", links, "species", space=3)

    assert "Index 4 does not fall within the valid range 1..3." in str(exc.value)
