import numpy as np
import pytest
import scipy.sparse as sp

from graphdata.aliases import Shape
from graphdata.convert import Converted, Same, convert, convert_result
from graphdata.errors import TypeConversionError
from graphdata.sparse import SparseVector, stored_positions


def test_int_list_becomes_new_float_vector() -> None:
    value = [1, 2, 3]

    result = convert_result(value, "YSV", float)

    assert isinstance(result, Converted)
    assert not result.aliased
    assert result.target.shape is Shape.VECTOR
    assert result.value.dtype == np.float64
    assert result.value.tolist() == [1.0, 2.0, 3.0]


def test_canonical_vector_is_returned_as_is() -> None:
    value = np.array([5.0, 8.0])

    result = convert_result(value, "V", float)

    assert isinstance(result, Same)
    assert result.aliased
    assert result.value is value
    assert convert(value, "V", float) is value


def test_vector_with_other_dtype_is_copied() -> None:
    value = np.array([1, 2], dtype=np.int64)

    result = convert(value, "V", float)

    assert result is not value
    assert result.dtype == np.float64
    assert value.dtype == np.int64


def test_label_identity_and_string_subclasses() -> None:
    label = "classic"
    assert convert(label, "Y") is label

    converted = convert(np.str_("linear"), "YS", float)
    assert type(converted) is str
    assert converted == "linear"


def test_scalar_promotions() -> None:
    assert convert(3, "S", float) == 3.0
    assert type(convert(3, "S", float)) is float
    assert type(convert(np.int32(4), "S", int)) is int
    assert convert(1, "S", bool) is True
    assert convert(0, "S", bool) is False


def test_bool_conversion_rejects_other_integers() -> None:
    with pytest.raises(TypeConversionError) as exc:
        convert(2, "S", bool, name="flag")

    message = str(exc.value)
    assert "'flag'" in message
    assert "bool scalar" in message
    assert "0 or 1" in message


def test_bool_vector_rejects_other_integers() -> None:
    assert convert(np.array([0, 1, 1]), "V", bool).tolist() == [False, True, True]

    with pytest.raises(TypeConversionError) as exc:
        convert(np.array([0, 2]), "V", bool)

    assert "0 or 1" in str(exc.value)


def test_real_is_not_an_integer() -> None:
    with pytest.raises(TypeConversionError) as exc:
        convert(1.5, "S", int, name="count")

    message = str(exc.value)
    assert "Could not convert 'count' to int scalar" in message
    assert "1.5 ::float" in message


def test_failure_lists_every_attempted_target() -> None:
    with pytest.raises(TypeConversionError) as exc:
        convert("fast", "SV", float, name="rate")

    message = str(exc.value)
    assert "either float scalar or float vector" in message
    assert "'fast' ::str" in message
    assert exc.value.context["field"] == "rate"


def test_tuples_are_not_vectors() -> None:
    with pytest.raises(TypeConversionError):
        convert((1.0, 2.0), "V", float)


def test_matrix_from_nested_lists() -> None:
    result = convert([[1, 2], [3, 4]], "M", float)

    assert result.shape == (2, 2)
    assert result.dtype == np.float64


def test_ragged_rows_are_not_a_matrix() -> None:
    with pytest.raises(TypeConversionError) as exc:
        convert([[1, 2], [3]], "M", float)

    assert "Could not convert" in str(exc.value)


def test_vector_is_lifted_to_sparse_vector() -> None:
    result = convert([0.0, 2.0, 0.0], "N", float)

    assert isinstance(result, SparseVector)
    assert result.size == 3
    assert result.positions() == [2]


def test_sparse_vector_identity_and_cast() -> None:
    vector = SparseVector(3, [1], [2.0])
    assert convert(vector, "N", float) is vector

    ints = SparseVector(3, [0, 2], [0, 4])
    result = convert(ints, "N", float)
    assert result is not ints
    assert result.dtype == np.float64
    # Stored zeros survive the cast.
    assert result.positions() == [1, 3]


def test_sparse_matrix_identity() -> None:
    matrix = sp.csc_matrix(np.array([[0.0, 1.0], [2.0, 0.0]]))

    assert convert(matrix, "E", float) is matrix


def test_other_sparse_formats_become_csc() -> None:
    rows, cols = np.array([0, 1]), np.array([1, 0])
    matrix = sp.csr_matrix((np.array([0, 3]), (rows, cols)), shape=(2, 2))

    result = convert(matrix, "E", float)

    assert type(result) is sp.csc_matrix
    assert result.dtype == np.float64
    assert sorted(stored_positions(result)) == [(0, 1), (1, 0)]


def test_dense_matrix_is_lifted_to_sparse_matrix() -> None:
    result = convert(np.array([[0, 1], [0, 0]]), "E", int)

    assert type(result) is sp.csc_matrix
    assert stored_positions(result) == [(0, 1)]


def test_first_applicable_target_wins() -> None:
    assert convert(2, "SV", float) == 2.0
    assert isinstance(convert([2], "SV", float), np.ndarray)
    assert convert_result({1: 2.0}, "SVK", float).target.shape is Shape.MAP
