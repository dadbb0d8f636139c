import numpy as np

from sph2d.neighbors.spatial_hash import BruteForceNeighbors, SpatialHash, make_neighbor_search


def _true_neighbors(pos, active, point, h):
    d = np.linalg.norm(pos - point[None, :], axis=1)
    return {int(j) for j in np.flatnonzero(active & (d <= h))}


def test_query_is_superset_of_true_neighbors_uniform_cloud():
    """
    The 3x3 block query may return extra particles but must never miss
    one within h (no false negatives).
    """
    rng = np.random.default_rng(0)
    h = 0.4
    pos = rng.uniform([-3.0, -1.5], [3.0, 1.5], size=(300, 2))
    active = np.ones((300,), dtype=np.bool_)

    ns = SpatialHash(support_radius=h)
    ns.build(pos, active)

    probes = np.concatenate([pos[:50], rng.uniform([-3.5, -2.0], [3.5, 2.0], size=(50, 2))])
    for point in probes:
        assert _true_neighbors(pos, active, point, h) <= set(ns.query(point))


def test_query_is_superset_for_clustered_and_exact_distance_pairs():
    h = 0.5
    pos = np.array([
        [10.0, 10.0],
        [10.5, 10.0],    # exactly h away
        [10.0, 9.5],     # exactly h away
        [10.01, 10.02],  # same cell cluster
        [10.02, 10.01],
        [11.6, 10.0],    # far
    ])
    active = np.ones((pos.shape[0],), dtype=np.bool_)

    ns = SpatialHash(support_radius=h)
    ns.build(pos, active)

    for point in pos:
        assert _true_neighbors(pos, active, point, h) <= set(ns.query(point))


def test_inactive_particles_are_never_candidates():
    pos = np.array([[0.0, 0.0], [0.1, 0.0], [0.2, 0.0]])
    active = np.array([True, False, True])

    for ns in (SpatialHash(0.4), BruteForceNeighbors(0.4)):
        ns.build(pos, active)
        assert 1 not in ns.query(pos[0])
        assert {0, 2} <= set(ns.query(pos[0]))


def test_origin_tracks_current_positions():
    h = 0.4
    ns = SpatialHash(support_radius=h)
    active = np.ones((2,), dtype=np.bool_)

    ns.build(np.array([[1.0, 2.0], [3.0, 0.5]]), active)
    assert np.allclose(ns.origin, [1.0 - h, 0.5 - h])

    ns.build(np.array([[-5.0, 4.0], [-2.0, 7.0]]), active)
    assert np.allclose(ns.origin, [-5.0 - h, 4.0 - h])


def test_origin_ignores_inactive_particles():
    h = 0.4
    ns = SpatialHash(support_radius=h)
    ns.build(np.array([[1.0, 1.0], [-50.0, -50.0]]), np.array([True, False]))
    assert np.allclose(ns.origin, [1.0 - h, 1.0 - h])


def test_brute_force_returns_every_active_particle():
    pos = np.array([[0.0, 0.0], [5.0, 0.0], [50.0, 50.0]])
    ns = make_neighbor_search(0.4, use_spatial_hash=False)
    ns.build(pos, np.ones((3,), dtype=np.bool_))

    assert isinstance(ns, BruteForceNeighbors)
    assert sorted(ns.query(pos[0])) == [0, 1, 2]


def test_query_is_deterministic_for_same_positions():
    pos = np.array([
        [0.0, 0.0],
        [0.3, 0.0],
        [0.0, 0.3],
        [0.3, 0.3],
    ])
    active = np.ones((4,), dtype=np.bool_)

    ns = SpatialHash(support_radius=0.4)
    ns.build(pos, active)
    first = ns.query(pos[0])

    ns.build(pos, active)
    assert ns.query(pos[0]) == first
