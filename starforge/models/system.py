"""Star system container: a flat arena of nodes keyed by id."""

from dataclasses import dataclass, field

from .body import Barycenter, CelestialBody, Node


@dataclass
class System:
    """One generated star system.

    Nodes form a tree through ``parent_id``; every relationship (parent,
    orbit host, barycenter members) is an id lookup into ``nodes``.
    """

    id: str  # Usually the seed
    name: str
    seed: str
    age_gyr: float  # System age (billions of years)
    epoch_t0: float = 0.0  # Reference epoch for all orbits (seconds)
    nodes: dict[str, Node] = field(default_factory=dict)  # Node ID -> node
    rulepack_id: str = ""
    rulepack_version: str = ""
    tags: list[str] = field(default_factory=list)
    toytown_factor: float = 0.0  # Display compression hint for renderers
    is_manually_edited: bool = False
    edit_counter: int = 0  # Number of edits applied (seeds the edit RNG)

    def __post_init__(self):
        """Validate system data after initialization."""
        if self.age_gyr < 0:
            raise ValueError(f"Invalid age_gyr: {self.age_gyr} (must be >= 0)")

    def add(self, node: Node) -> Node:
        """Add a node to the arena.

        Raises:
            ValueError: If a node with the same id already exists
        """
        if node.id in self.nodes:
            raise ValueError(f"Duplicate node id: {node.id}")
        self.nodes[node.id] = node
        return node

    def get(self, node_id: str | None) -> Node | None:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def get_body(self, node_id: str | None) -> CelestialBody | None:
        node = self.get(node_id)
        return node if isinstance(node, CelestialBody) else None

    def children(self, parent_id: str) -> list[Node]:
        """Direct children of a node, in insertion order."""
        return [node for node in self.nodes.values() if node.parent_id == parent_id]

    def descendants(self, node_id: str) -> list[str]:
        """Ids of every node below ``node_id`` (breadth-first)."""
        found = []
        queue = [node_id]
        while queue:
            current = queue.pop(0)
            for child in self.children(current):
                found.append(child.id)
                queue.append(child.id)
        return found

    def roots(self) -> list[Node]:
        return [node for node in self.nodes.values() if node.parent_id is None]

    def root(self) -> Node | None:
        roots = self.roots()
        return roots[0] if roots else None

    def stars(self) -> list[CelestialBody]:
        return [
            node
            for node in self.nodes.values()
            if isinstance(node, CelestialBody) and node.role_hint == "star"
        ]

    def bodies(self) -> list[CelestialBody]:
        return [node for node in self.nodes.values() if isinstance(node, CelestialBody)]

    def barycenters(self) -> list[Barycenter]:
        return [node for node in self.nodes.values() if isinstance(node, Barycenter)]

    def mass_of(self, node_id: str | None) -> float:
        """Mass of a node in kg, 0.0 when the node is missing."""
        node = self.get(node_id)
        if isinstance(node, Barycenter):
            return node.effective_mass_kg
        if isinstance(node, CelestialBody):
            return node.mass_kg
        return 0.0
