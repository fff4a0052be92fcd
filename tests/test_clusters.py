import numpy as np
import pytest

from kmeans.clusters import AccumulatorDelta, ClusterAccumulators, ClusterMembership


def test_membership_swap_remove():
    members = ClusterMembership(n=6, k=2)
    for p in range(5):
        members.add(0, p)
    members.add(1, 5)
    members.remove(0, 1)
    assert sorted(members.members(0).tolist()) == [0, 2, 3, 4]
    # The last member took the freed slot and can still be removed
    members.remove(0, 4)
    members.remove(0, 0)
    assert sorted(members.members(0).tolist()) == [2, 3]
    assert members.sizes().tolist() == [2, 1]


def test_membership_move_and_missing_point():
    members = ClusterMembership(n=3, k=3)
    members.add(0, 0)
    members.add(0, 1)
    members.move(0, 0, 2)
    assert members.members(0).tolist() == [1]
    assert members.members(2).tolist() == [0]
    with pytest.raises(KeyError):
        members.remove(1, 0)
    with pytest.raises(KeyError):
        members.remove(0, 2)
    assert [m.tolist() for m in members] == [[1], [], [0]]


def test_accumulator_merge():
    data = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    sums = ClusterAccumulators(k=2, dim=2)
    first = AccumulatorDelta(k=2, dim=2)
    for p, x in enumerate(data):
        first.add(p, x, 0)
    sums.merge(first)
    second = AccumulatorDelta(k=2, dim=2)
    second.move(2, data[2], 0, 1)
    sums.merge(second)
    assert np.allclose(sums.sums, [[4.0, 6.0], [5.0, 6.0]])
    assert sums.counts.tolist() == [2, 1]
    assert first.moves == [(0, -1, 0), (1, -1, 0), (2, -1, 0)]
    assert second.moves == [(2, 0, 1)]


def test_means_keep_previous_centroid_of_empty_cluster():
    sums = ClusterAccumulators(k=3, dim=2)
    delta = AccumulatorDelta(k=3, dim=2)
    delta.add(0, np.array([2.0, 2.0]), 0)
    delta.add(1, np.array([4.0, 0.0]), 0)
    delta.add(2, np.array([7.0, 7.0]), 2)
    sums.merge(delta)
    previous = np.array([[0.0, 0.0], [9.0, 9.0], [1.0, 1.0]])
    new_means, empty = sums.means(previous)
    assert np.allclose(new_means, [[3.0, 1.0], [9.0, 9.0], [7.0, 7.0]])
    assert empty == [1]
    # A fresh buffer, the previous centroids are untouched
    assert new_means is not previous
    assert np.allclose(previous[0], [0.0, 0.0])
