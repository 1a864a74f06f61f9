import importlib.util
from pathlib import Path

from grid3_uptime.uptime import Drift, NodeState, Unknown

EXAMPLE = Path(__file__).parent.parent / "examples" / "node_states.py"


def load_example():
    spec = importlib.util.spec_from_file_location("node_states", EXAMPLE)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_describe_known_states():
    node_states = load_example()
    assert node_states.describe(Drift(-42)) == "Uptime drift of -42 seconds detected"
    assert node_states.describe(Unknown(0)).startswith("Node status is unknown since")


def test_describe_falls_back_to_repr():
    class Rebooting(NodeState):
        __slots__ = ()

    node_states = load_example()
    assert node_states.describe(Rebooting(7)) == "Rebooting(7)"
