"""
Graph and routes document serialization.

Documents are the JSON shapes used for explicit export and load:

    graph:  {"nodes": [{"id", "name", "position": {"x", "y"}}],
             "edges": [{"id", "type", "source", "target", "weight"}]}
    routes: {routeId: {"name", "id", "nodes": [...], "edges": [...], "color"}}

Loading validates everything before touching the model, so a rejected
document leaves the current network untouched.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, RootModel
from pydantic import ValidationError as PydanticValidationError

from ..models.station import Station
from ..models.link import Link
from ..models.route import Route, DEFAULT_ROUTE_COLOR
from .network_model import NetworkModel

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when a loaded document is malformed."""

    pass


class PositionDocument(BaseModel):
    x: float
    y: float


class NodeDocument(BaseModel):
    id: str
    name: str
    position: PositionDocument


class EdgeDocument(BaseModel):
    id: str
    type: Literal["walk", "track"]
    source: str
    target: str
    weight: int = Field(..., gt=0)


class GraphDocument(BaseModel):
    """Structural schema of a graph document."""

    nodes: List[NodeDocument]
    edges: List[EdgeDocument]


class RouteDocument(BaseModel):
    name: str
    id: str
    nodes: List[str] = []
    edges: List[str] = []
    color: str = DEFAULT_ROUTE_COLOR
    offset: float = 0


class RoutesDocument(RootModel[Dict[str, RouteDocument]]):
    """Structural schema of a routes document."""

    pass


def graph_document(model: NetworkModel) -> Dict[str, Any]:
    """Serialize the model's stations and links to a graph document."""
    snapshot = model.export_snapshot()
    return {
        "nodes": [station.to_dict() for station in snapshot.stations],
        "edges": [link.to_dict() for link in snapshot.links],
    }


def routes_document(model: NetworkModel) -> Dict[str, Any]:
    """Serialize the model's routes to a routes document."""
    return {route_id: route.to_dict() for route_id, route in model.routes.items()}


def _drop_unnamed_nodes(data: Any) -> Any:
    """Remove nodes without a string name before structural validation."""
    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
        return data
    nodes = [node for node in data["nodes"]
             if isinstance(node, dict) and isinstance(node.get("name"), str)]
    dropped = len(data["nodes"]) - len(nodes)
    if dropped:
        logger.warning(f"Dropped {dropped} graph node(s) without a name")
    return {**data, "nodes": nodes}


def parse_graph_document(data: Any) -> Tuple[List[Station], List[Link]]:
    """
    Validate a graph document and convert it to stations and links.

    Raises:
        ValidationError: If the document is structurally or referentially invalid
    """
    try:
        document = GraphDocument.model_validate(_drop_unnamed_nodes(data))
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid graph document: {e}") from e

    stations = [Station.from_dict(node.model_dump()) for node in document.nodes]
    station_ids = {station.id for station in stations}
    if len(station_ids) != len(stations):
        raise ValidationError("Invalid graph document: duplicate node ids")

    links = []
    for edge in document.edges:
        if edge.source not in station_ids or edge.target not in station_ids:
            raise ValidationError(f"Invalid graph document: edge {edge.id} has a missing endpoint")
        if edge.source == edge.target:
            raise ValidationError(f"Invalid graph document: edge {edge.id} is a self-loop")
        links.append(Link.from_dict(edge.model_dump()))
    if len({link.id for link in links}) != len(links):
        raise ValidationError("Invalid graph document: duplicate edge ids")

    return stations, links


def parse_routes_document(data: Any, stations: List[Station], links: List[Link]) -> List[Route]:
    """
    Validate a routes document against the stations and links it refers to.

    Raises:
        ValidationError: If the document is malformed or references unknown elements
    """
    try:
        document = RoutesDocument.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid routes document: {e}") from e

    station_ids = {station.id for station in stations}
    link_ids = {link.id for link in links}
    routes = []
    for key, entry in document.root.items():
        if key != entry.id:
            raise ValidationError(f"Invalid routes document: key {key} does not match id {entry.id}")
        unknown = [sid for sid in entry.nodes if sid not in station_ids]
        unknown += [lid for lid in entry.edges if lid not in link_ids]
        if unknown:
            raise ValidationError(f"Invalid routes document: route {key} references {unknown}")
        routes.append(Route.from_dict(entry.model_dump()))
    return routes


def load_documents(model: NetworkModel, graph_data: Any, routes_data: Any = None) -> None:
    """
    Replace the model contents with loaded documents.

    Raises:
        ValidationError: If either document is invalid; the model is unchanged
    """
    stations, links = parse_graph_document(graph_data)
    routes = parse_routes_document(routes_data, stations, links) if routes_data is not None else []
    model.replace_contents(stations, links, routes)


class DocumentRepository:
    """Reads and writes graph and routes documents as JSON files."""

    def __init__(self, model: NetworkModel):
        """
        Initialize the repository.

        Args:
            model: Network model to export from and load into
        """
        self.model = model

    def save(self, graph_path: Path, routes_path: Optional[Path] = None) -> None:
        """Write the current network (and optionally routes) to disk."""
        graph_path = Path(graph_path)
        with open(graph_path, "w", encoding="utf-8") as f:
            json.dump(graph_document(self.model), f, indent=2)
        logger.info(f"Saved graph document to {graph_path}")

        if routes_path is not None:
            routes_path = Path(routes_path)
            with open(routes_path, "w", encoding="utf-8") as f:
                json.dump(routes_document(self.model), f, indent=2)
            logger.info(f"Saved routes document to {routes_path}")

    def load(self, graph_path: Path, routes_path: Optional[Path] = None) -> None:
        """
        Load documents from disk into the model.

        Raises:
            ValidationError: If a file is not valid JSON or fails validation
        """
        graph_data = self._read_json(Path(graph_path))
        routes_data = self._read_json(Path(routes_path)) if routes_path is not None else None
        load_documents(self.model, graph_data, routes_data)
        logger.info(f"Loaded documents from {graph_path}")

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON in {path}: {e}") from e
        except OSError as e:
            raise ValidationError(f"Cannot read {path}: {e}") from e
