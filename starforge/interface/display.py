"""Text rendering of a generated system for the terminal."""

from ..models import CelestialBody, System
from ..utils.constants import EARTH_MASS_KG, SOLAR_MASS_KG

# (header, width) per column of the body table
BODY_COLUMNS = (
    ("Name", 24),
    ("Class", 22),
    ("a (AU)", 9),
    ("Mass", 11),
    ("T (K)", 7),
    ("Habitability", 12),
)


class SystemDisplay:
    """Prints a system as a header plus one table row per body."""

    def show_system(self, system: System) -> None:
        """Print the system header and the body table, depth-first from the root."""
        print(f"\n{'=' * 60}")
        print(f"{system.name}  (seed {system.seed})")
        print(f"{'=' * 60}")
        print(f"Age: {system.age_gyr:.2f} Gyr   Stars: {len(system.stars())}   Nodes: {len(system.nodes)}")
        if system.is_manually_edited:
            print(f"Manually edited ({system.edit_counter} edit(s))")
        print()

        rows = list(self._walk(system))
        if not rows:
            print("Empty system\n")
            return

        print(self._rule("┌", "┬", "┐"))
        print("│" + "│".join(self._format_left(f" {header}", width) for header, width in BODY_COLUMNS) + "│")
        print(self._rule("├", "┼", "┤"))
        for depth, body in rows:
            print(self._row(depth, body))
        print(self._rule("└", "┴", "┘"))
        print()

    def _walk(self, system: System):
        """Yield (depth, body) pairs in tree order, skipping barycenters."""
        stack = [(0, node) for node in reversed(system.roots())]
        while stack:
            depth, node = stack.pop()
            if isinstance(node, CelestialBody):
                yield depth, node
            for child in reversed(system.children(node.id)):
                stack.append((depth + 1, child))

    def _row(self, depth: int, body: CelestialBody) -> str:
        name = "  " * depth + body.name
        a_au = f"{body.orbit.elements.a_au:.3f}" if body.orbit else "-"
        temperature = f"{body.temperature_k:.0f}" if body.temperature_k is not None else "-"
        cells = (
            self._format_left(f" {name}", BODY_COLUMNS[0][1]),
            self._format_left(f" {body.classes[0] if body.classes else body.role_hint}", BODY_COLUMNS[1][1]),
            self._format_right(f"{a_au} ", BODY_COLUMNS[2][1]),
            self._format_right(f"{self._mass(body)} ", BODY_COLUMNS[3][1]),
            self._format_right(f"{temperature} ", BODY_COLUMNS[4][1]),
            self._format_left(f" {body.habitability_tier or '-'}", BODY_COLUMNS[5][1]),
        )
        return "│" + "│".join(cells) + "│"

    def _mass(self, body: CelestialBody) -> str:
        if body.is_star:
            return f"{body.mass_kg / SOLAR_MASS_KG:.2f} Ms"
        if body.mass_kg <= 0:
            return "-"
        return f"{body.mass_kg / EARTH_MASS_KG:.3g} Me"

    def _rule(self, left: str, middle: str, right: str) -> str:
        return left + middle.join("─" * width for _, width in BODY_COLUMNS) + right

    def _format_left(self, text: str, width: int) -> str:
        """Left-align text within specified width, truncating if too long."""
        if len(text) > width:
            return text[: width - 1] + "…"
        return text.ljust(width)

    def _format_right(self, text: str, width: int) -> str:
        """Right-align text within specified width, truncating if too long."""
        if len(text) > width:
            return text[: width - 1] + "…"
        return text.rjust(width)
