"""Link graph for the client-side force-directed view.

Nodes and links come out in input insertion order so layouts are
reproducible across identical rebuilds.
"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import yaml

logger = logging.getLogger(__name__)

# Tags sharing at least this many pages get a tag-to-tag link
CO_OCCURRENCE_THRESHOLD = 2

GRAPH_DEFAULTS: Dict[str, Any] = {
    'only_if_linked': True,
    'depth': 2,
    'show_full_graph': True,
    'show_tags': True,
    'colors': {},
}

Graph = Dict[str, List[Dict[str, Any]]]


def section_from_url(url: str) -> str:
    """Section name of a page URL.

    ``/recipes/chai/`` is in ``recipes``; root pages like ``/about/`` have
    no section and return an empty string.
    """
    parts = url.strip('/').split('/')
    return parts[0] if len(parts) > 1 else ""


def strip_anchor(url: str) -> str:
    """Drop a ``#heading`` suffix so links point at the page."""
    return url.split('#', 1)[0]


def tag_node_id(tag: str) -> str:
    return f"/tags/{tag}/"


def build_graph(
    per_page_links: Mapping[str, Mapping[str, Any]],
    tag_index: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Graph:
    """Build a nodes + links graph from per-page outgoing links.

    Args:
        per_page_links: page URL -> ``{title, outgoing: [url, ...]}``;
            outgoing URLs are already resolved and may carry anchors
        tag_index: Optional tag index; when non-empty, tags become nodes
            linked to their pages and to co-occurring tags

    Returns:
        ``{"nodes": [...], "links": [...]}``. Page nodes have
        ``id, title, section, type="page"``; tag nodes add ``nodeVal``.
        Links are directed ``{source, target}`` pairs without duplicates,
        self-links or unknown endpoints.
    """
    known_urls = set(per_page_links)

    nodes: List[Dict[str, Any]] = [
        {
            'id': url,
            'title': page.get('title', url),
            'section': section_from_url(url),
            'type': 'page',
        }
        for url, page in per_page_links.items()
    ]

    seen: Set[Tuple[str, str]] = set()
    links: List[Dict[str, str]] = []

    def add_link(source: str, target: str) -> bool:
        if (source, target) in seen:
            return False
        seen.add((source, target))
        links.append({'source': source, 'target': target})
        return True

    for source_url, page in per_page_links.items():
        for raw_target in page.get('outgoing') or []:
            target_url = strip_anchor(raw_target)
            if target_url == source_url or target_url not in known_urls:
                continue
            add_link(source_url, target_url)

    if not tag_index:
        return {'nodes': nodes, 'links': links}

    tag_pages: Dict[str, Set[str]] = {}
    for tag, tag_data in tag_index.items():
        tag_id = tag_node_id(tag)
        page_refs = tag_data.get('pages') or []
        degree = len(page_refs) if page_refs else tag_data.get('count', 0)

        nodes.append({
            'id': tag_id,
            'title': f"#{tag}",
            'section': 'tags',
            'type': 'tag',
            'nodeVal': 1 + math.log(degree + 1) * 2,
        })

        linked: Set[str] = set()
        for page_ref in page_refs:
            page_url = page_ref.get('url')
            if page_url in known_urls and add_link(page_url, tag_id):
                linked.add(page_url)
        tag_pages[tag_id] = linked

    tag_ids = list(tag_pages)
    for i, a in enumerate(tag_ids):
        for b in tag_ids[i + 1:]:
            if len(tag_pages[a] & tag_pages[b]) >= CO_OCCURRENCE_THRESHOLD:
                add_link(a, b)

    return {'nodes': nodes, 'links': links}


def merge_graph_settings(parsed: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Layer vault graph settings over the defaults.

    ``colors`` is merged key by key so partial overrides work.
    """
    parsed = dict(parsed or {})
    settings = {**GRAPH_DEFAULTS, **parsed}
    colors = parsed.get('colors') if isinstance(parsed.get('colors'), dict) else {}
    settings['colors'] = {**GRAPH_DEFAULTS['colors'], **colors}
    return settings


def load_graph_settings(vault_path: Path) -> Dict[str, Any]:
    """Read ``.bloob/graph.yaml`` from the vault, merged with defaults.

    A missing or unparsable file yields the defaults.
    """
    settings_path = Path(vault_path) / '.bloob' / 'graph.yaml'
    if not settings_path.exists():
        return merge_graph_settings()

    try:
        parsed = yaml.safe_load(settings_path.read_text(encoding='utf-8')) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to parse .bloob/graph.yaml: %s, using defaults", e)
        return merge_graph_settings()

    if not isinstance(parsed, dict):
        logger.warning(".bloob/graph.yaml is not a mapping, using defaults")
        return merge_graph_settings()
    return merge_graph_settings(parsed)
