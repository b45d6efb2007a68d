"""Load directory rules from YAML."""

from __future__ import annotations

from pathlib import Path

import yaml

from slowkicker.policy.models import DirectoryRule


def load_rules(path: str | Path) -> tuple[DirectoryRule, ...]:
    """Load the ``directories`` list from a YAML file path."""
    text = Path(path).read_text(encoding="utf-8")
    return load_rules_from_string(text)


def load_rules_from_string(text: str) -> tuple[DirectoryRule, ...]:
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError("Config YAML must be a mapping")
    return parse_rules(data.get("directories", []))


def parse_rules(rules_data: list) -> tuple[DirectoryRule, ...]:
    if not isinstance(rules_data, list):
        raise ValueError("'directories' must be a list")

    rules: list[DirectoryRule] = []
    for i, r in enumerate(rules_data):
        if not isinstance(r, dict):
            raise ValueError(f"Directory rule #{i + 1} must be a mapping")
        if "mask" not in r:
            raise ValueError(f"Directory rule #{i + 1} has no 'mask'")
        try:
            rule = DirectoryRule(
                mask=str(r["mask"]),
                min_speed=float(r.get("min_speed", 0)),
                min_duration=int(r.get("min_duration", 0)),
                max_kicks=int(r.get("max_kicks", 0)),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Directory rule '{r['mask']}' is invalid: {e}") from e
        rules.append(rule)
    return tuple(rules)
