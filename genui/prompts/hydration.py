"""Component hydration prompt builder."""

from __future__ import annotations

import json

from genui.catalog import ArtifactCatalog
from genui.schemas import decision_schema
from genui.types import NO_TOOL_RESPONSE, ArtifactDescriptor, JsonValue, SchemaVersion


def build_hydration_prompt(
    catalog: ArtifactCatalog,
    version: SchemaVersion | str,
    tool_response: JsonValue = NO_TOOL_RESPONSE,
) -> str:
    """
    Build the system prompt for hydrating a chosen component.

    With a *tool_response* the model is told to use that data; without one
    it is told it may call the offered tools.
    """
    sections: list[str] = [BASE_SECTION]
    if SchemaVersion(version) is SchemaVersion.V1:
        sections.append(SUGGESTED_ACTIONS_SECTION)

    if tool_response is not NO_TOOL_RESPONSE:
        sections.append(
            "You have received a response from a tool. Use this data to help "
            f"determine what props to pass in: {json.dumps(tool_response)}"
        )
    else:
        sections.append(
            "You can also use any of the provided tools to fetch data needed "
            "to pass into the component."
        )

    sections.append(catalog.describe())
    sections.append(format_instructions(decision_schema(version)))
    return "\n\n".join(sections)


def build_component_message(
    artifact: ArtifactDescriptor,
    tool_response: JsonValue = NO_TOOL_RESPONSE,
) -> str:
    """The user turn naming the chosen component and its expected props."""
    text = (
        f"<componentName>{artifact.name}</componentName>\n"
        f"<componentDescription>{json.dumps(artifact.description)}</componentDescription>\n"
        f"<expectedProps>{json.dumps(artifact.props)}</expectedProps>"
    )
    if tool_response is not NO_TOOL_RESPONSE:
        text += f"\n<toolResponse>{json.dumps(tool_response)}</toolResponse>"
    return text


def format_instructions(schema: dict) -> str:
    return (
        "Return a JSON object that matches the given JSON Schema.\n"
        "If a field is optional and there is no input, don't include it in the JSON response.\n"
        "Your output will be parsed and type-checked according to the provided schema, "
        "so make sure all fields match the schema exactly and there are no trailing commas.\n"
        "Here is the JSON Schema instance your output must adhere to. Only return valid JSON.\n"
        f"```json\n{json.dumps(schema)}\n```"
    )


BASE_SECTION = """You are an AI assistant that interacts with users and helps them perform tasks.
To help the user perform these tasks, you are able to generate UI components. You are able to display components and decide what props to pass in. However, you can not interact with, or control 'state' data.
When prompted, you will be given the existing conversation history, followed by the component to display, its description provided by the user, the shape of any props to pass in, and any other related context.
Use the conversation history and other provided context to determine what props to pass in."""

SUGGESTED_ACTIONS_SECTION = """When generating suggestedActions, consider the following:
1. Each suggestion should be a natural follow-up action that would make use of an available component
2. The actionText should be phrased as a user message that would trigger the use of a specific component
3. Suggestions should be contextually relevant to what the user is trying to accomplish
4. Include 1-3 suggestions that would help the user progress in their current task
5. The label should be a clear, concise button text, while the actionText can be more detailed"""
