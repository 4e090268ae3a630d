"""
Visualization export for asset graph projections.

Exports the graph built by ``to_networkx`` to D3.js JSON, a standalone
interactive HTML page, and GEXF for Gephi.
"""

import json
import html

import networkx as nx

from ..store.model import AssetType

GROUPS = {
    AssetType.FQDN: "name",
    AssetType.IP_ADDRESS: "address",
    AssetType.NETBLOCK: "address",
    AssetType.AUTONOMOUS_SYSTEM: "routing",
    AssetType.RIR_ORGANIZATION: "routing",
    AssetType.AUTNUM_RECORD: "routing",
    AssetType.DOMAIN_RECORD: "registration",
    AssetType.CONTACT_RECORD: "registration",
    AssetType.PERSON: "registration",
    AssetType.ORGANIZATION: "registration",
    AssetType.LOCATION: "registration",
    AssetType.EMAIL_ADDRESS: "registration",
    AssetType.PHONE: "registration",
    AssetType.SERVICE: "service",
    AssetType.SOCKET_ADDRESS: "service",
    AssetType.NETWORK_ENDPOINT: "service",
    AssetType.URL: "service",
    AssetType.TLS_CERTIFICATE: "service",
}


def asset_group(asset_type: str) -> str:
    """Display group of an asset type tag."""
    try:
        return GROUPS.get(AssetType(asset_type), "other")
    except ValueError:
        return "other"


class D3Exporter:
    """Export asset graph projections to D3.js force-directed JSON format."""

    @staticmethod
    def to_d3_json(G: nx.MultiDiGraph) -> dict:
        """
        Convert a projection graph to D3.js layout JSON.

        Returns dict with 'nodes' and 'links' arrays; link endpoints are
        node indices.
        """
        nodes = []
        for node, data in G.nodes(data=True):
            atype = data.get("type", "")
            nodes.append({
                "id": data.get("label", str(node)),
                "index": node,
                "type": atype,
                "label": data.get("label", ""),
                "title": data.get("title", ""),
                "group": asset_group(atype),
            })

        links = []
        for u, v, data in G.edges(data=True):
            links.append({
                "source": u,
                "target": v,
                "label": data.get("label", ""),
                "title": data.get("title", ""),
            })

        return {"nodes": nodes, "links": links}

    @staticmethod
    def save(filepath: str, G: nx.MultiDiGraph):
        """Save D3.js JSON to file."""
        data = D3Exporter.to_d3_json(G)
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)


class GEXFExporter:
    """Export asset graph projections to GEXF for Gephi."""

    @staticmethod
    def save(filepath: str, G: nx.MultiDiGraph):
        H = nx.MultiDiGraph()
        for node, data in G.nodes(data=True):
            H.add_node(
                node,
                label=data.get("label", ""),
                type=data.get("type", ""),
                title=data.get("title", ""),
            )
        for u, v, data in G.edges(data=True):
            H.add_edge(u, v, label=data.get("label", ""))
        nx.write_gexf(H, filepath)


class HTMLExporter:
    """Generate interactive HTML asset maps using D3.js."""

    @staticmethod
    def to_html(
        G: nx.MultiDiGraph,
        title: str = "AssetGraph",
        width: int = 1200,
        height: int = 800,
    ) -> str:
        """Generate a standalone HTML page with an interactive D3.js graph."""
        d3_data = D3Exporter.to_d3_json(G)
        data_json = json.dumps(d3_data).replace("</", "<\\/")

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <script src="https://d3js.org/d3.v7.min.js"></script>
    <style>
        body {{ margin: 0; background: #1a1a2e; color: #e0e0e0; font-family: sans-serif; }}
        h1 {{ text-align: center; padding: 10px; margin: 0; background: #16213e; }}
        #graph {{ width: 100%; height: calc(100vh - 50px); }}
        .node {{ cursor: pointer; }}
        .node text {{ font-size: 11px; fill: #e0e0e0; }}
        .link {{ stroke: #4a4a6a; stroke-opacity: 0.6; }}
        .tooltip {{
            position: absolute; background: #16213e; border: 1px solid #0f3460;
            padding: 8px 12px; border-radius: 4px; font-size: 12px;
            pointer-events: none; display: none;
        }}
        .legend {{ position: absolute; bottom: 20px; right: 20px; background: #16213e;
            padding: 10px; border-radius: 4px; font-size: 12px; }}
    </style>
</head>
<body>
    <h1>{html.escape(title)}</h1>
    <div id="graph"></div>
    <div class="tooltip" id="tooltip"></div>
    <div class="legend">
        <strong>Asset Groups</strong><br>
        <span style="color: #e94560;">&#9679;</span> Name &nbsp;
        <span style="color: #f5a623;">&#9679;</span> Address &nbsp;
        <span style="color: #4ecca3;">&#9679;</span> Routing<br>
        <span style="color: #533483;">&#9679;</span> Registration &nbsp;
        <span style="color: #3282b8;">&#9679;</span> Service &nbsp;
        <span style="color: #888888;">&#9679;</span> Other
    </div>
    <script>
    const data = {data_json};

    const width = {width};
    const height = {height};

    const colorScale = d3.scaleOrdinal()
        .domain(["name", "address", "routing", "registration", "service", "other"])
        .range(["#e94560", "#f5a623", "#4ecca3", "#533483", "#3282b8", "#888888"]);

    const svg = d3.select("#graph").append("svg")
        .attr("width", "100%")
        .attr("height", "100%")
        .attr("viewBox", [0, 0, width, height]);

    svg.append("defs").append("marker")
        .attr("id", "arrow").attr("viewBox", "0 -5 10 10")
        .attr("refX", 18).attr("markerWidth", 6).attr("markerHeight", 6)
        .attr("orient", "auto")
        .append("path").attr("d", "M0,-5L10,0L0,5").attr("fill", "#4a4a6a");

    const g = svg.append("g");

    svg.call(d3.zoom().on("zoom", (event) => {{
        g.attr("transform", event.transform);
    }}));

    const simulation = d3.forceSimulation(data.nodes)
        .force("link", d3.forceLink(data.links).id(d => d.index).distance(100))
        .force("charge", d3.forceManyBody().strength(-300))
        .force("center", d3.forceCenter(width / 2, height / 2))
        .force("collision", d3.forceCollide().radius(30));

    const link = g.append("g").selectAll("line")
        .data(data.links).enter().append("line")
        .attr("class", "link")
        .attr("marker-end", "url(#arrow)");

    link.append("title").text(d => d.title);

    const node = g.append("g").selectAll("g")
        .data(data.nodes).enter().append("g")
        .attr("class", "node")
        .call(d3.drag()
            .on("start", dragstarted)
            .on("drag", dragged)
            .on("end", dragended));

    node.append("circle")
        .attr("r", 8)
        .attr("fill", d => colorScale(d.group))
        .attr("stroke", "#fff")
        .attr("stroke-width", 1.5);

    node.append("text")
        .attr("dx", 12).attr("dy", 4)
        .text(d => d.label);

    const tooltip = d3.select("#tooltip");

    node.on("mouseover", (event, d) => {{
        tooltip.style("display", "block").text(d.title);
    }}).on("mousemove", (event) => {{
        tooltip.style("left", (event.pageX + 10) + "px")
            .style("top", (event.pageY - 10) + "px");
    }}).on("mouseout", () => {{ tooltip.style("display", "none"); }});

    simulation.on("tick", () => {{
        link.attr("x1", d => d.source.x).attr("y1", d => d.source.y)
            .attr("x2", d => d.target.x).attr("y2", d => d.target.y);
        node.attr("transform", d => `translate(${{d.x}},${{d.y}})`);
    }});

    function dragstarted(event) {{
        if (!event.active) simulation.alphaTarget(0.3).restart();
        event.subject.fx = event.subject.x;
        event.subject.fy = event.subject.y;
    }}
    function dragged(event) {{
        event.subject.fx = event.x;
        event.subject.fy = event.y;
    }}
    function dragended(event) {{
        if (!event.active) simulation.alphaTarget(0);
        event.subject.fx = null;
        event.subject.fy = null;
    }}
    </script>
</body>
</html>"""

    @staticmethod
    def save(filepath: str, G: nx.MultiDiGraph, **kwargs):
        """Save interactive HTML asset map."""
        content = HTMLExporter.to_html(G, **kwargs)
        with open(filepath, "w") as f:
            f.write(content)
