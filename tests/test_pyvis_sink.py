import pytest

from ontology_navigator.config import ExplorerConfig
from ontology_navigator.schemas.ontology_schema import NodeKind, RelationKind, ResourceCategory
from ontology_navigator.visualization.ontology_explorer import OntologyExplorer
from ontology_navigator.visualization.pyvis_explorer import PyvisRenderSink

from conftest import EX


@pytest.fixture
def pyvis_sink():
    return PyvisRenderSink(height="600px")


def add_pair(sink: PyvisRenderSink):
    sink.upsert_node(EX + "Student", "Student", ResourceCategory.CLASS, NodeKind.RESOURCE)
    sink.upsert_node(EX + "Person", "Person", ResourceCategory.CLASS, NodeKind.RESOURCE)


class TestPyvisRenderSink:
    def test_node_upsert_updates_in_place(self, pyvis_sink):
        pyvis_sink.upsert_node(EX + "Person", "Person", ResourceCategory.INSTANCE, NodeKind.RESOURCE)
        pyvis_sink.upsert_node(EX + "Person", "Person", ResourceCategory.CLASS, NodeKind.RESOURCE, title="Class")

        assert len(pyvis_sink.network.nodes) == 1
        node = pyvis_sink.network.node_map[EX + "Person"]
        assert node['color'] == PyvisRenderSink.CATEGORY_COLORS[ResourceCategory.CLASS]
        assert node['title'] == "Class"
        assert pyvis_sink.statistics()['nodes'] == {'class': 1}

    def test_literal_style(self, pyvis_sink):
        pyvis_sink.upsert_node("literal:abc", "Alice", ResourceCategory.INSTANCE, NodeKind.LITERAL)

        node = pyvis_sink.network.node_map["literal:abc"]
        assert node['shape'] == 'box'
        assert node['color'] == PyvisRenderSink.LITERAL_COLOR

    def test_edge_upsert_updates_in_place(self, pyvis_sink):
        add_pair(pyvis_sink)
        pyvis_sink.upsert_edge("e1", EX + "Student", EX + "Person", "subClassOf", RelationKind.GENERIC)
        pyvis_sink.upsert_edge("e1", EX + "Student", EX + "Person", "subClassOf", RelationKind.SUBCLASS_OF)

        assert len(pyvis_sink.network.edges) == 1
        edge = pyvis_sink.network.edges[0]
        assert edge['color'] == PyvisRenderSink.RELATIONSHIP_COLORS[RelationKind.SUBCLASS_OF]
        assert pyvis_sink.statistics()['edges'] == {'subclass_of': 1}

    async def test_request_layout(self, pyvis_sink):
        await pyvis_sink.request_layout()
        await pyvis_sink.request_layout()

        assert pyvis_sink.layout_runs == 2
        assert pyvis_sink.network.options['layout']['hierarchical']['enabled'] is True

    async def test_explorer_session_renders_through_pyvis(self, gateway, tmp_path):
        sink = PyvisRenderSink(layout="physics")
        explorer = OntologyExplorer(
            gateway, ExplorerConfig(auto_expand=False, expansion_delay_ms=0), sink=sink
        )
        gateway.subclasses(EX + "Animal", EX + "Dog")

        node = await explorer.confirm_selection(EX + "Animal")
        await explorer.on_node_activated(node.id)

        assert set(sink.network.node_map) == {EX + "Animal", EX + "Dog"}
        assert len(sink.network.edges) == 1
        assert sink.layout_runs == 2
        assert sink.write_html(str(tmp_path / "session.html")).endswith("session.html")

    def test_clear_all(self, pyvis_sink):
        add_pair(pyvis_sink)
        pyvis_sink.clear_all()

        assert pyvis_sink.network.nodes == []
        assert pyvis_sink.statistics() == {'nodes': {}, 'edges': {}}

    def test_unknown_layout(self):
        with pytest.raises(ValueError):
            PyvisRenderSink(layout="circle")

    def test_write_html_with_legend(self, pyvis_sink, tmp_path):
        add_pair(pyvis_sink)
        pyvis_sink.upsert_edge("e1", EX + "Student", EX + "Person", "subClassOf", RelationKind.SUBCLASS_OF)

        path = pyvis_sink.write_html(str(tmp_path / "view.html"))

        content = (tmp_path / "view.html").read_text(encoding='utf-8')
        assert path.endswith("view.html")
        assert "Ontology Navigator" in content
        assert "Class (2)" in content
