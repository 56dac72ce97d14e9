import pytest

from wellguide import memory
from wellguide.flows.base import WizardFlow
from wellguide.graph.steps import TERMINAL, Step, StepGraph
from wellguide.tools.recommend import RuleTable


@pytest.fixture(autouse=True)
def clean_memory():
    memory.reset_all()
    yield
    memory.reset_all()


@pytest.fixture
def four_step_flow():
    """Plain linear flow: a -> b -> c -> d, one required field per step."""
    steps = StepGraph([
        Step(id="a", required_fields={"fa"}, next_step="b"),
        Step(id="b", required_fields={"fb"}, next_step="c"),
        Step(id="c", required_fields={"fc"}, next_step="d", skippable=True),
        Step(id="d", required_fields={"fd"}, next_step=TERMINAL),
    ])
    rules = RuleTable(
        "four",
        tiers=(("fa", "fc"), ("fa",)),
        rules={("x", "z"): "x and z", ("x",): "x only"},
        fallback="generic",
    )
    return WizardFlow(flow_id="four", title="Four steps", steps=steps, rules=rules)
