"""
Explore an ontology from a starting resource and save the result as HTML.

Usage:
    ontology-navigator --endpoint http://localhost:3030/ontologies/sparql --search Person
    ontology-navigator --resource http://example.com/Person --node-cap 80 --json view.json
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .client.sparql_client import SparqlGateway
from .config import EndpointSettings, ExplorerConfig
from .core.namespaces import NamespaceDictionary
from .exceptions import NavigatorError
from .visualization.ontology_explorer import OntologyExplorer
from .visualization.pyvis_explorer import PyvisRenderSink

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ontology-navigator",
        description="Incrementally explore an ontology hosted behind a SPARQL endpoint"
    )
    parser.add_argument('--endpoint', help="SPARQL query endpoint (default: $SPARQL_ENDPOINT)")
    start = parser.add_mutually_exclusive_group(required=True)
    start.add_argument('--resource', help="URI of the resource to start from")
    start.add_argument('--search', help="Free text; the best matching resource is used")
    parser.add_argument('--output', default="ontology_explorer.html", help="HTML output file")
    parser.add_argument('--json', dest='json_output', help="Also export the view as JSON")
    parser.add_argument('--node-cap', type=int, help="Maximum nodes added by automatic expansion")
    parser.add_argument('--no-auto-expand', action='store_true', help="Only expand the start node")
    parser.add_argument('--delay-ms', type=int, default=0, help="Pause between automatic expansions")
    parser.add_argument('--namespaces', help="JSON file of {prefix, uri} entries")
    parser.add_argument('--layout', choices=['breadthfirst', 'physics'], default='breadthfirst')
    parser.add_argument('--verbose', action='store_true')
    return parser


def build_settings(args: argparse.Namespace) -> EndpointSettings:
    """Endpoint settings from the environment, with --endpoint taking precedence"""
    env = dict(os.environ)
    if args.endpoint:
        env['SPARQL_ENDPOINT'] = args.endpoint
    return EndpointSettings.from_env(env)


def build_config(args: argparse.Namespace) -> ExplorerConfig:
    config = ExplorerConfig.from_env()
    updates = {'expansion_delay_ms': args.delay_ms, 'layout': args.layout}
    if args.node_cap is not None:
        updates['node_cap'] = args.node_cap
    if args.no_auto_expand:
        updates['auto_expand'] = False
    return ExplorerConfig(**{**config.model_dump(), **updates})


async def explore(args: argparse.Namespace) -> int:
    settings = build_settings(args)
    config = build_config(args)
    namespaces = (
        NamespaceDictionary.from_json(args.namespaces) if args.namespaces
        else NamespaceDictionary.common()
    )
    sink = PyvisRenderSink(layout=config.layout)

    async with SparqlGateway.from_settings(settings) as gateway:
        explorer = OntologyExplorer(
            gateway, config, namespaces, sink, graph=settings.default_graph
        )

        if args.search:
            candidates = await explorer.search.search(args.search)
            if not candidates:
                print(f"❌ No resources match '{args.search}'")
                return 1
            for index, candidate in enumerate(candidates[:10]):
                print(f"  {index}. {candidate.display_label} ({candidate.type_hint or 'Resource'}) - {candidate.uri_display}")
            explorer.on_suggestion_selected(0)
            node = await explorer.confirm_selection()
        else:
            node = await explorer.confirm_selection(args.resource)

        if not config.auto_expand:
            await explorer.on_node_activated(node.id)
        outcome = await explorer.wait_until_idle()

    viz_file = sink.write_html(args.output)
    if args.json_output:
        explorer.export_for_web_visualization(args.json_output)

    stats = explorer.state.statistics()
    print()
    print("=" * 70)
    print(f"🎨 Explored from: {node.label} ({namespaces.compress(node.id)})")
    print(f"  Nodes: {stats['total_nodes']} (cap {stats['node_cap']})")
    print(f"  Edges: {stats['total_edges']}")
    print(f"  Expanded: {stats['expanded']}, still queued: {stats['queued']}")
    print(f"  Categories: {stats['node_categories']}")
    print(f"  Queue: {outcome.value}")
    print(f"📁 File: {viz_file}")
    print("=" * 70)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        return asyncio.run(explore(args))
    except NavigatorError as e:
        logger.error(f"❌ {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
