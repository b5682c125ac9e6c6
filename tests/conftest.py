from pathlib import Path

import pytest

from resource_tracking.rules.loader import load_rules
from resource_tracking.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def rules() -> Rules:
    """
    Rules loaded from the REAL rules.yaml at the project root.
    """
    rules_path = PROJECT_ROOT / "rules.yaml"
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)
