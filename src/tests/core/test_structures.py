"""
Tests for the incidence structure contract and incidence matrices.

Run with:
    python3 -m pytest tests/core/test_structures.py -v
"""

import numpy as np
import pytest

from flag_math.spec.rank import Rank
from flag_math.spec.structures import IncidenceStructure, Element, validate_structure
from flag_math.operators.incidence import (
    incidence_matrix,
    verify_diamond_property,
    assert_diamond_property,
)
from flag_math.spec.structures import DiamondPropertyError

from polytopes import (
    build_nullitope, build_point, build_dyad, build_polygon,
    build_simplex, build_hypercube, build_orthoplex,
    build_hemicube, build_hemioctahedron,
    build_triangle_compound, build_broken_triangle,
)


# =============================================================================
# Construction
# =============================================================================

class TestFromSubs:
    """from_subs adds the minimal element and derives sups."""

    def test_nullitope(self):
        s = build_nullitope()
        assert s.rank() == Rank(-1)
        assert s.el_counts() == [1]

    def test_point(self):
        s = build_point()
        assert s.rank() == Rank(0)
        assert s.el_counts() == [1, 1]
        assert s.get_element(-1, 0).sups == [0]

    def test_triangle_sups_derived(self):
        s = build_polygon(3)
        assert s.el_counts() == [1, 3, 3, 1]
        # edge 2 joins vertices 2 and 0
        assert s.get_element(0, 0).sups == [0, 2]
        assert s.get_element(1, 2).subs == [0, 2]
        assert s.get_element(2, 0).subs == [0, 1, 2]

    def test_not_sorted_until_sort(self):
        s = IncidenceStructure.from_subs([[[0], [0]], [[1, 0]]])
        assert not s.sorted
        assert s.get_element(1, 0).subs == [1, 0]
        s.sort()
        assert s.sorted
        assert s.get_element(1, 0).subs == [0, 1]

    def test_out_of_bounds_sub_raises(self):
        with pytest.raises(ValueError, match="out of bounds"):
            IncidenceStructure.from_subs([[[0], [0]], [[0, 2]]])

    def test_get_element_missing(self):
        s = build_polygon(4)
        with pytest.raises(IndexError):
            s.get_element(0, 4)
        with pytest.raises(IndexError):
            s.get_element(3, 0)


class TestCounts:
    """Element counts of the standard test polytopes."""

    @pytest.mark.parametrize("k,expected", [
        (0, [1, 1]),
        (1, [1, 2, 1]),
        (2, [1, 4, 4, 1]),
        (3, [1, 8, 12, 6, 1]),
        (4, [1, 16, 32, 24, 8, 1]),
    ])
    def test_hypercube(self, k, expected):
        assert build_hypercube(k).el_counts() == expected

    @pytest.mark.parametrize("k,expected", [
        (2, [1, 3, 3, 1]),
        (3, [1, 4, 6, 4, 1]),
        (4, [1, 5, 10, 10, 5, 1]),
    ])
    def test_simplex(self, k, expected):
        assert build_simplex(k).el_counts() == expected

    def test_octahedron(self):
        assert build_orthoplex(3).el_counts() == [1, 6, 12, 8, 1]

    def test_hemi_polytopes(self):
        assert build_hemicube().el_counts() == [1, 4, 6, 3, 1]
        assert build_hemioctahedron().el_counts() == [1, 3, 6, 4, 1]

    def test_vertex_and_facet_count(self):
        cube = build_hypercube(3)
        assert cube.vertex_count() == 8
        assert cube.facet_count() == 6
        assert build_nullitope().facet_count() == 0
        assert build_point().facet_count() == 1


# =============================================================================
# Contract validation
# =============================================================================

class TestValidateStructure:
    """validate_structure checks everything but the diamond property."""

    @pytest.mark.parametrize("builder", [
        build_nullitope, build_point, build_dyad,
        lambda sort=True: build_polygon(5, sort),
        lambda sort=True: build_hypercube(3, sort),
        lambda sort=True: build_orthoplex(3, sort),
        build_hemicube,
        build_triangle_compound,
        build_broken_triangle,
    ])
    def test_builders_pass(self, builder):
        valid, errors = validate_structure(builder())
        assert valid, errors

    def test_two_maximal_elements(self):
        s = IncidenceStructure.from_subs([[[0], [0]], [[0, 1], [0, 1]]])
        valid, errors = validate_structure(s, strict=False)
        assert not valid
        assert any("maximal" in e for e in errors)

    def test_strict_raises(self):
        s = IncidenceStructure.from_subs([[[0], [0]], [[0, 1], [0, 1]]])
        with pytest.raises(ValueError, match="contract violation"):
            validate_structure(s)

    def test_broken_mirror(self):
        s = build_polygon(3)
        s.get_element(0, 0).sups.remove(2)
        valid, errors = validate_structure(s, strict=False)
        assert not valid
        assert any("does not list it" in e for e in errors)

    def test_unsorted_but_marked_sorted(self):
        s = build_polygon(3)
        s.get_element(2, 0).subs.reverse()
        valid, errors = validate_structure(s, strict=False)
        assert not valid
        assert any("not ascending" in e for e in errors)


# =============================================================================
# First flag
# =============================================================================

class TestFirstFlag:
    """The canonical seed takes subs[0] from the top down."""

    def test_nullitope_has_none(self):
        assert build_nullitope().first_flag() is None
        assert build_nullitope().first_oriented_flag() is None

    def test_point(self):
        assert build_point().first_flag() == ()

    def test_square(self):
        # max subs[0] = edge 0, edge 0 subs[0] = vertex 0
        assert build_polygon(4).first_flag() == (0, 0)

    def test_cube_entries_are_incident(self):
        s = build_hypercube(3)
        flag = s.first_flag()
        assert len(flag) == 3
        for r in range(2):
            assert flag[r] in s.get_element(r + 1, flag[r + 1]).subs

    def test_first_oriented_flag_even(self):
        from flag_math.operators.flags import Orientation
        of = build_polygon(4).first_oriented_flag()
        assert of.orientation is Orientation.EVEN
        assert of.flag == (0, 0)


# =============================================================================
# Incidence matrices and the diamond property
# =============================================================================

class TestIncidenceMatrix:
    """A_r[i, j] = 1 iff element i of rank r-1 is in subs of element j."""

    def test_triangle_edges(self):
        A = incidence_matrix(build_polygon(3), 1)
        assert A.shape == (3, 3)
        dense = A.toarray()
        assert dense[:, 0].tolist() == [1, 1, 0]
        assert dense[:, 2].tolist() == [1, 0, 1]

    def test_column_and_row_sums(self):
        s = build_hypercube(3)
        A = incidence_matrix(s, 2)
        assert A.shape == (12, 6)
        assert np.all(np.asarray(A.sum(axis=0)).ravel() == 4)
        assert np.all(np.asarray(A.sum(axis=1)).ravel() == 2)

    def test_bottom_rank(self):
        A = incidence_matrix(build_polygon(4), 0)
        assert A.shape == (1, 4)
        assert A.nnz == 4

    @pytest.mark.parametrize("r", [-1, 3])
    def test_rank_out_of_range(self, r):
        with pytest.raises(ValueError):
            incidence_matrix(build_polygon(4), r)


class TestDiamondProperty:
    """Every height-2 section has exactly two middle elements."""

    @pytest.mark.parametrize("builder", [
        build_nullitope, build_point, build_dyad,
        lambda sort=True: build_polygon(6, sort),
        lambda sort=True: build_simplex(4, sort),
        lambda sort=True: build_hypercube(4, sort),
        lambda sort=True: build_orthoplex(4, sort),
        build_hemicube, build_hemioctahedron,
        build_triangle_compound,
    ])
    def test_valid(self, builder):
        result = verify_diamond_property(builder())
        assert result['valid'], result['violations']
        assert result['violations'] == []

    def test_trivial_structures_have_no_sections(self):
        for s in [build_nullitope(), build_point()]:
            result = verify_diamond_property(s)
            assert result['n_sections'] == 0
            assert result['histogram'] == {}

    def test_cube_histogram(self):
        # (min, edge): 12, (vertex, face): 24, (edge, max): 12
        result = verify_diamond_property(build_hypercube(3))
        assert result['histogram'] == {2: 48}
        assert result['n_sections'] == 48

    def test_broken_triangle(self):
        result = verify_diamond_property(build_broken_triangle())
        assert not result['valid']
        assert result['histogram'] == {2: 5, 3: 2}
        assert result['n_sections'] == 7
        assert all(size == 3 for (_, _, _, size) in result['violations'])
        assert {(r, lo) for (r, lo, _, _) in result['violations']} == {(1, 0), (1, 1)}

    def test_assert_raises_with_context(self):
        with pytest.raises(DiamondPropertyError, match=r"\[unit\]"):
            assert_diamond_property(build_broken_triangle(), context="unit")

    def test_diamond_error_is_value_error(self):
        assert issubclass(DiamondPropertyError, ValueError)

    def test_element_equality(self):
        assert Element([0, 1], [2]) == Element([0, 1], [2])
        assert Element([0, 1]) != Element([1, 0])
