"""
Pyvis rendering sink
Mirrors the explored view into an interactive Pyvis network and saves it as HTML
"""

import html
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Dict

from pyvis.network import Network

from ..schemas.ontology_schema import NodeKind, RelationKind, ResourceCategory
from .render_sink import RenderSink

logger = logging.getLogger(__name__)

BASE_OPTIONS = {
    "interaction": {
        "hover": True,
        "tooltipDelay": 100,
        "navigationButtons": True,
        "keyboard": {"enabled": True},
        "zoomView": True,
        "dragView": True
    },
    "manipulation": {"enabled": False},
    "nodes": {
        "font": {"size": 16, "face": "arial"},
        "borderWidth": 2,
        "borderWidthSelected": 4
    },
    "edges": {
        "font": {"size": 12, "align": "middle"},
        "arrows": {"to": {"enabled": True, "scaleFactor": 0.5}},
        "smooth": {"type": "continuous", "roundness": 0.5}
    }
}

LAYOUT_OPTIONS = {
    "breadthfirst": {
        "layout": {
            "hierarchical": {
                "enabled": True,
                "direction": "UD",
                "sortMethod": "directed",
                "levelSeparation": 150,
                "nodeSpacing": 200
            }
        },
        "physics": {"enabled": True, "solver": "hierarchicalRepulsion"}
    },
    "physics": {
        "layout": {"hierarchical": {"enabled": False}},
        "physics": {
            "barnesHut": {
                "gravitationalConstant": -50000,
                "centralGravity": 0.5,
                "springLength": 250,
                "springConstant": 0.05,
                "damping": 0.1,
                "avoidOverlap": 0.2
            },
            "minVelocity": 0.75,
            "solver": "barnesHut",
            "stabilization": {"enabled": True, "iterations": 1000, "updateInterval": 25}
        }
    }
}


class PyvisRenderSink(RenderSink):
    """Render sink backed by a Pyvis network"""

    CATEGORY_COLORS = {
        ResourceCategory.CLASS: '#4169E1',     # Royal blue
        ResourceCategory.PROPERTY: '#228B22',  # Forest green
        ResourceCategory.INSTANCE: '#FF8C00',  # Dark orange
        ResourceCategory.SHAPE: '#9b59b6',     # Purple
    }
    LITERAL_COLOR = '#808080'

    CATEGORY_SHAPES = {
        ResourceCategory.CLASS: ('dot', 30),
        ResourceCategory.PROPERTY: ('diamond', 20),
        ResourceCategory.INSTANCE: ('dot', 15),
        ResourceCategory.SHAPE: ('triangle', 25),
    }

    RELATIONSHIP_COLORS = {
        RelationKind.SUBCLASS_OF: '#3498db',  # Blue
        RelationKind.DOMAIN: '#2ecc71',       # Green
        RelationKind.RANGE: '#f39c12',        # Orange
        RelationKind.GENERIC: '#bdc3c7',      # Light gray
    }

    def __init__(self, height: str = "900px", width: str = "100%", layout: str = "breadthfirst"):
        if layout not in LAYOUT_OPTIONS:
            raise ValueError(f"Unknown layout {layout!r}; expected one of {sorted(LAYOUT_OPTIONS)}")
        self.height = height
        self.width = width
        self.layout = layout
        self.layout_runs = 0
        self._categories: Dict[str, str] = {}
        self._edge_kinds: Dict[str, RelationKind] = {}
        self._edges: Dict[str, dict] = {}
        self.network = self._new_network()

    def _new_network(self) -> Network:
        net = Network(
            height=self.height,
            width=self.width,
            bgcolor='#ffffff',
            font_color='#000000',
            notebook=False,
            directed=True,
            cdn_resources='remote'
        )
        # set_options turns net.options into a plain dict; call it once per network
        net.set_options(json.dumps({**BASE_OPTIONS, **LAYOUT_OPTIONS[self.layout]}))
        return net

    def _node_style(self, category: ResourceCategory, kind: NodeKind) -> dict:
        if kind is NodeKind.LITERAL:
            return {'color': self.LITERAL_COLOR, 'shape': 'box', 'size': 10}
        shape, size = self.CATEGORY_SHAPES[category]
        return {'color': self.CATEGORY_COLORS[category], 'shape': shape, 'size': size}

    def upsert_node(self, node_id, label, category, kind, title=None):
        style = self._node_style(category, kind)
        self._categories[node_id] = 'literal' if kind is NodeKind.LITERAL else category.value

        existing = self.network.node_map.get(node_id)
        if existing is not None:
            existing.update(label=label, title=title or label, **style)
            return

        self.network.add_node(node_id, label=label, title=title or label, **style)

    def upsert_edge(self, edge_id, source, target, label, kind):
        options = {
            'label': label,
            'title': f"{label}: {source} → {target}",
            'color': self.RELATIONSHIP_COLORS.get(kind, self.RELATIONSHIP_COLORS[RelationKind.GENERIC]),
            'width': 2 if kind is RelationKind.SUBCLASS_OF else 1.5,
            'dashes': kind in (RelationKind.DOMAIN, RelationKind.RANGE),
        }
        self._edge_kinds[edge_id] = kind

        existing = self._edges.get(edge_id)
        if existing is not None:
            existing.update(options)
            return

        self.network.add_edge(source, target, **options)
        self._edges[edge_id] = self.network.edges[-1]

    async def request_layout(self):
        # Pyvis lays out in the browser from the options set in _new_network
        self.layout_runs += 1

    def clear_all(self):
        self._categories = {}
        self._edge_kinds = {}
        self._edges = {}
        self.network = self._new_network()

    def statistics(self) -> dict:
        return {
            'nodes': dict(Counter(self._categories.values())),
            'edges': dict(Counter(kind.value for kind in self._edge_kinds.values())),
        }

    def write_html(self, output_file: str = "ontology_explorer.html", legend: bool = True) -> str:
        """Save the interactive network, optionally with a legend overlay"""
        output_path = Path(output_file)
        self.network.save_graph(str(output_path))

        if legend:
            html_content = output_path.read_text(encoding='utf-8')
            html_content = html_content.replace('</body>', f'{self._create_legend_html()}</body>')
            output_path.write_text(html_content, encoding='utf-8')

        logger.info(f"✅ Visualization saved to: {output_path.absolute()}")
        logger.info(f"🌐 Open in browser: file://{output_path.absolute()}")
        return str(output_path.absolute())

    def _create_legend_html(self) -> str:
        stats = self.statistics()
        node_rows = "".join(
            f"""<div><span style="display:inline-block; width:12px; height:12px; background:{color}; border-radius:50%; margin-right:5px;"></span>{html.escape(category.value.title())} ({stats['nodes'].get(category.value, 0)})</div>"""
            for category, color in self.CATEGORY_COLORS.items()
        )
        literal_row = (
            f"""<div><span style="display:inline-block; width:12px; height:12px; background:{self.LITERAL_COLOR}; margin-right:5px;"></span>Literal ({stats['nodes'].get('literal', 0)})</div>"""
        )
        edge_rows = "".join(
            f"<div>{html.escape(kind.value)}: {count}</div>"
            for kind, count in ((k, stats['edges'].get(k.value, 0)) for k in RelationKind)
        )
        return f"""
        <div style="position: fixed; top: 10px; right: 10px; background: white; padding: 15px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.2); font-family: Arial; max-width: 300px; z-index: 1000;">
            <h3 style="margin-top: 0; color: #2c3e50;">Ontology Navigator</h3>
            <h4 style="margin-bottom: 5px; color: #34495e;">Nodes</h4>
            <div style="font-size: 12px;">{node_rows}{literal_row}</div>
            <h4 style="margin: 10px 0 5px 0; color: #34495e;">Relationships</h4>
            <div style="font-size: 11px;">{edge_rows}</div>
        </div>
        """
