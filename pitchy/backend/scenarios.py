from typing import Dict, List, Optional

from .models import Scenario


SCENARIOS: Dict[str, Scenario] = {
    "cold_call": Scenario(
        id="cold_call",
        name="Cold Call",
        description="Introducing yourself and product to a new prospect",
        icon="\U0001F4DE",
        initial_context=(
            "This is a cold call scenario. The salesperson is calling you for the first time "
            "to introduce themselves and their product/service. You have no prior relationship "
            "with them. React as your persona would to an unexpected sales call."
        ),
        objectives=[
            "Get the prospect's attention and interest",
            "Qualify the prospect's needs",
            "Schedule a follow-up meeting or demo",
            "Overcome initial objections and skepticism",
        ],
    ),
    "product_demo": Scenario(
        id="product_demo",
        name="Product Demo",
        description="Showing product features and benefits",
        icon="\U0001F4BB",
        initial_context=(
            "This is a product demonstration scenario. You have already expressed some interest "
            "in the product and have agreed to see a demo. The salesperson will be showing you "
            "features and benefits. React according to your persona's priorities and concerns."
        ),
        objectives=[
            "Clearly demonstrate key product features",
            "Connect features to customer benefits",
            "Handle questions about functionality",
            "Move toward closing or next steps",
        ],
    ),
    "objection_handling": Scenario(
        id="objection_handling",
        name="Objection Handling",
        description="Customer has concerns that need to be addressed",
        icon="❓",
        initial_context=(
            "This is an objection handling scenario. You are interested in the product but have "
            "significant concerns or objections that need to be addressed before you can move "
            "forward. Start the conversation by expressing your main objection based on your persona."
        ),
        objectives=[
            "Listen carefully to customer concerns",
            "Address objections with empathy and facts",
            "Provide reassurance and proof points",
            "Turn objections into selling opportunities",
        ],
    ),
}


def get_scenario(scenario_id: str) -> Optional[Scenario]:
    return SCENARIOS.get(scenario_id)


def list_scenarios() -> List[Scenario]:
    return list(SCENARIOS.values())
