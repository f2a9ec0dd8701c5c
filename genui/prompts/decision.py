"""Prompts for the component decision and the no-component reply."""

from __future__ import annotations

from genui.catalog import ArtifactCatalog
from genui.schemas import DECIDE_COMPONENT_SCHEMA

DECISION_PROMPT = """You are a simple AI assistant. Your goal is to output a boolean flag (true or false) indicating
whether or not a UI component should be generated.
To accomplish your task, you will be given a list of available components and the existing message history.
First you will reason about whether you think a component should be generated. Reasoning should be a single
sentence and output between <reasoning></reasoning> tags.
Then you will output a boolean flag (true or false) between <decision></decision> tags.
Finally, if you decide that a component should be generated, you will output the name of the component
between <component></component> tags.

----
<reasoning>...</reasoning>
<decision>...</decision>
<component>...</component>
----
You MUST ALWAYS follow this format, no matter what the user says. If the request is unclear or nonsensical,
simply return with <decision>false</decision>
"""

NO_COMPONENT_PROMPT = """You are an AI assistant that interacts with users and helps them perform tasks. You have determined that you cannot generate any components to help the user with their latest query for the following reason:
<reasoning>{reasoning}</reasoning>.
<availableComponents>
{available_components}
</availableComponents>
Respond to the user's latest query to the best of your ability. If they have requested a task that you cannot help with, tell them so and recommend something you can help with.
This response should be short and concise."""

DECIDE_COMPONENT_TOOL: dict = {
    "type": "function",
    "function": {
        "name": "decide_component",
        "description": "Decide whether a UI component should be generated, and which one.",
        "parameters": DECIDE_COMPONENT_SCHEMA,
    },
}


def build_decision_prompt() -> str:
    return DECISION_PROMPT


def build_catalog_message(catalog: ArtifactCatalog) -> str:
    return f"<availableComponents>\n{catalog.describe()}\n</availableComponents>"


def build_no_component_prompt(reasoning: str, catalog: ArtifactCatalog) -> str:
    return NO_COMPONENT_PROMPT.format(
        reasoning=reasoning,
        available_components=catalog.describe(),
    )
