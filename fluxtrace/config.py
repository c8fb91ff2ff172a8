"""Configuration classes for fluxtrace components."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TraversalConfig:
    """Attribute names and defaults shared by the graph, view and I/O layers."""

    # Node attribute holding the external lookup key (e.g. a wallet address)
    key_attr: str = "hash"

    # Edge attribute holding the non-negative transfer weight
    weight_attr: str = "amount"

    # Node attribute holding the set of category labels
    labels_attr: str = "labels"

    # Category a start key is resolved against when the caller gives none
    start_category: str = "Address"

    def with_overrides(self, **overrides: str) -> "TraversalConfig":
        """Return a copy with the given non-empty fields replaced."""
        values = {
            name: getattr(self, name)
            for name in ("key_attr", "weight_attr", "labels_attr", "start_category")
        }
        for name, value in overrides.items():
            if name not in values:
                raise ValueError(f"Unknown configuration field '{name}'")
            if value:
                values[name] = value
        return TraversalConfig(**values)


# Global configuration instance
DEFAULT_CONFIG = TraversalConfig()
