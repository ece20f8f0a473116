from graphdata.containers import (
    Adjacency,
    BinAdjacency,
    BinMap,
    Map,
    accesses,
    nrefs,
    nrefspace,
    nrefspace_inner,
    nrefspace_outer,
    refs,
    refs_inner,
    refs_outer,
    refspace,
    refspace_inner,
    refspace_outer,
)
from graphdata.spaces import Indexed, Labeled


def _food_web() -> Adjacency:
    return Adjacency(
        "index",
        float,
        [
            (1, Map("index", float, [(5, 100.0), (2, 1.0)])),
            (3, Map("index", float, [(1, 200.0)])),
        ],
    )


def test_references_in_order_of_appearance() -> None:
    web = _food_web()

    assert refs_outer(web) == [1, 3]
    assert refs_inner(web) == [5, 2, 1]
    assert refs(web) == [1, 5, 2, 3]
    assert list(accesses(web)) == [(1, 5), (1, 2), (3, 1)]


def test_reference_spaces_assume_contiguous_indices() -> None:
    web = _food_web()

    assert nrefs(web) == 4
    assert nrefspace(web) == 5
    assert nrefspace_inner(web) == 5
    assert refspace(web) == Indexed(5)
    assert refspace_outer(web) == Indexed(3)


def test_label_reference_spaces() -> None:
    links = BinAdjacency("label", [("wolf", BinMap("label", ["deer", "hare"]))])

    assert refspace(links) == Labeled(("wolf", "deer", "hare"))
    assert nrefspace(BinMap("label", ["a", "b"])) == 2
    assert refspace(Map("index", int)) == Indexed(0)


def test_binmap_equality_and_repr() -> None:
    keys = BinMap("index", [2, 1])

    assert keys == BinMap("index", [2, 1])
    assert keys != BinMap("index", [1, 2])
    assert repr(keys) == "BinMap[index]({2, 1})"
    assert repr(Map("label", float, [("a", 1.0)])) == "Map[label, float]({'a': 1.0})"


def test_outer_and_inner_reference_spaces() -> None:
    web = _food_web()

    assert nrefspace_outer(web) == 3
    assert refspace_inner(web) == Indexed(5)

    links = BinAdjacency(
        "label",
        [("wolf", BinMap("label", ["deer"])), ("fox", BinMap("label", []))],
    )
    assert refspace_outer(links) == Labeled(("wolf", "fox"))
    assert refspace_inner(links) == Labeled(("deer",))
    assert nrefspace_inner(links) == 1
