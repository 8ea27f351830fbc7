"""
Satisfaction quality gate.
"""
from saturn.services.llm.agents.classifier import BooleanClassifier
from saturn.services.llm.schema import boolean_schema

SATISFACTION_SCHEMA = boolean_schema(
    name="check_satisfactory_response",
    description=(
        "Evaluates if the response directly addresses the question with a clear "
        "and meaningful answer, avoiding generic or vague language. For example, "
        "avoid responses like 'I don't know' or 'Please check yourself'."
    ),
    field="satisfactory",
    field_description=(
        "Indicates whether the response satisfactorily answers the query, "
        "providing a direct and useful answer"
    ),
)


class SatisfactionClassifier(BooleanClassifier):
    name = "satisfactory"
    task = "Does this response satisfactorily answer the question"
    field = "satisfactory"
    schema = SATISFACTION_SCHEMA
