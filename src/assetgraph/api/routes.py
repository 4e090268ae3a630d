"""
REST API for AssetGraph.

Serves the traversal projection, discovered names, ASN summary and new
names for a loaded asset graph. Read-only.
"""

from dataclasses import asdict
from typing import Optional

try:
    from flask import Flask, Blueprint, jsonify, request, abort
except ImportError:
    Flask = None
    Blueprint = None

from ..analysis.delta import new_names, scope_cutoff
from ..analysis.names import discovered_names
from ..graph.traversal import to_networkx, viz_data
from ..store.facade import GraphStore
from ..store.model import parse_timestamp
from ..viz.export import D3Exporter


class AssetGraphAPI:
    """
    REST API server for asset graph queries.

    Endpoints:
      GET /api/v1/health  — API health check
      GET /api/v1/viz     — Projection as D3 JSON (?domain=..&since=..)
      GET /api/v1/names   — Discovered names (?domain=..&ip=1)
      GET /api/v1/asns    — ASN summary (?domain=..)
      GET /api/v1/new     — Names new since a cutoff (?domain=..&since=..)
    """

    def __init__(self, store: Optional[GraphStore] = None):
        self.store = store

    def set_store(self, store: GraphStore):
        """Replace the asset graph being served."""
        self.store = store

    def create_app(self) -> "Flask":
        """Create and configure the Flask application."""
        if Flask is None:
            raise ImportError("Flask is required: pip install flask")

        app = Flask(__name__)
        api = Blueprint("api", __name__, url_prefix="/api/v1")

        @api.route("/health")
        def health():
            return jsonify({
                "status": "ok",
                "store_loaded": self.store is not None,
            })

        @api.route("/viz")
        def viz():
            domains, since = self._query_args()
            nodes, edges = viz_data(domains, since, self.store)
            return jsonify(D3Exporter.to_d3_json(to_networkx(nodes, edges)))

        @api.route("/names")
        def names():
            domains, since = self._query_args()
            ip = request.args.get("ip", "") in ("1", "true", "yes")
            records, _ = discovered_names(domains, self.store, since, ipv4=ip, ipv6=ip)
            return jsonify({
                "names": [asdict(r) for r in records],
                "count": len(records),
            })

        @api.route("/asns")
        def asns():
            domains, since = self._query_args()
            _, summary = discovered_names(domains, self.store, since, ipv4=True, ipv6=True)
            return jsonify({
                "asns": {
                    str(asn): {"rir_name": info.rir_name, "cidrs": info.cidrs}
                    for asn, info in sorted(summary.items())
                },
            })

        @api.route("/new")
        def new():
            domains, since = self._query_args()
            cutoff = since or scope_cutoff(domains, self.store)
            return jsonify({
                "names": new_names(domains, self.store, cutoff),
                "cutoff": cutoff.isoformat() if cutoff else None,
            })

        app.register_blueprint(api)
        return app

    def _query_args(self):
        if self.store is None:
            abort(404, "No asset graph loaded")

        domains = []
        for value in request.args.getlist("domain"):
            domains.extend(d.strip().lower() for d in value.split(",") if d.strip())
        if not domains:
            abort(400, "Request must include at least one 'domain'")

        since = None
        raw = request.args.get("since")
        if raw:
            try:
                since = parse_timestamp(raw)
            except ValueError:
                abort(400, f"Invalid 'since' timestamp: {raw}")
        return domains, since
