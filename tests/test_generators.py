import pytest

from weft.algorithms.generators import BarabasiAlbertGenerator
from weft.core.errors import InvalidParameter
from weft.core.invariants import validate_structure


def test_growth_adds_one_vertex_and_fixed_edges_per_step():
    init_vertices = 1
    edges_per_step = 1
    timesteps = 10
    generator = BarabasiAlbertGenerator(init_vertices, edges_per_step, seed=0)
    for i in range(1, 11):
        generator.evolve_graph(timesteps)
        graph = generator.generate_graph()
        assert graph.vertex_count() == i * timesteps + init_vertices
        assert graph.edge_count() == edges_per_step * i * timesteps
        validate_structure(graph)


def test_attached_edges_target_distinct_older_vertices():
    generator = BarabasiAlbertGenerator(5, 3, seed=11)
    generator.evolve_graph(30)
    graph = generator.generate_graph()
    for vertex in range(5, 35):
        targets = [graph.get_dest(edge) for edge in graph.get_out_edges(vertex)]
        assert len(targets) == 3
        assert len(set(targets)) == 3
        assert all(target < vertex for target in targets)


def test_seed_makes_growth_reproducible():
    def grow(seed):
        generator = BarabasiAlbertGenerator(2, 2, seed=seed)
        generator.evolve_graph(25)
        graph = generator.generate_graph()
        return {edge: graph.get_endpoints(edge) for edge in graph.get_edges()}

    assert grow(5) == grow(5)


def test_undirected_growth_and_custom_factories():
    names = iter(f"v{i}" for i in range(100))
    generator = BarabasiAlbertGenerator(
        2, 1, seed=1, directed=False, vertex_factory=lambda: next(names), edge_factory=object
    )
    generator.evolve_graph(4)
    graph = generator.generate_graph()
    assert graph.get_vertices() == {f"v{i}" for i in range(6)}
    assert all(not graph.is_directed(edge) for edge in graph.get_edges())


def test_snapshot_is_independent_of_the_generator():
    generator = BarabasiAlbertGenerator(1, 1, seed=2)
    generator.evolve_graph(3)
    graph = generator.generate_graph()
    generator.evolve_graph(3)
    assert graph.vertex_count() == 4


@pytest.mark.parametrize("init_vertices,edges_to_attach", [(0, 1), (2, 0), (2, 3)])
def test_invalid_parameters(init_vertices, edges_to_attach):
    with pytest.raises(InvalidParameter):
        BarabasiAlbertGenerator(init_vertices, edges_to_attach)
