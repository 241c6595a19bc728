import json

import pytest

from db_agent.planning import (
    EmptyResponseError,
    MalformedJsonError,
    SchemaInvalidError,
    recover_plan,
)
from db_agent.planning.recovery import decode_payload, find_balanced_object, strip_code_fences

PAYLOAD = {
    "plan": ["Create songs table", "Add API route"],
    "files_to_modify": [
        {"filePath": "src/db/schema.ts", "newContent": "export const x = { a: '}' };\n"},
    ],
    "commands_to_run": ["npx drizzle-kit push"],
}
RAW = json.dumps(PAYLOAD, indent=2)


@pytest.mark.parametrize(
    "answer",
    [
        RAW,
        f"```json\n{RAW}\n```",
        f"```\n{RAW}\n```",
        f"Here is the plan you asked for:\n{RAW}\nLet me know if you need anything else.",
        f"Sure! ```JSON\n{RAW}\n``` Hope this helps {{not json}}",
    ],
)
def test_equivalent_answers_recover_identical_plans(answer):
    assert recover_plan(answer) == recover_plan(RAW)


def test_recovered_plan_contents():
    plan = recover_plan(RAW)

    assert plan.steps == ["Create songs table", "Add API route"]
    assert plan.files_to_modify[0].file_path == "src/db/schema.ts"
    assert plan.files_to_modify[0].new_content.endswith("'}' };\n")
    assert plan.commands_to_run == ["npx drizzle-kit push"]


@pytest.mark.parametrize("answer", ["", "   \n\t "])
def test_empty_answer(answer):
    with pytest.raises(EmptyResponseError):
        recover_plan(answer)


def test_text_without_braces_is_malformed():
    with pytest.raises(MalformedJsonError) as excinfo:
        recover_plan("```json\nI could not produce a plan\n```")

    assert excinfo.value.raw_text.startswith("```json")
    assert excinfo.value.cleaned_text == "I could not produce a plan"


def test_json_array_is_not_a_plan():
    with pytest.raises(MalformedJsonError):
        decode_payload('["plan"]')


def test_missing_files_to_modify_names_the_field():
    with pytest.raises(SchemaInvalidError) as excinfo:
        recover_plan(json.dumps({"plan": ["step"]}))

    assert excinfo.value.field == "files_to_modify"


def test_plan_of_wrong_type_names_the_field():
    with pytest.raises(SchemaInvalidError) as excinfo:
        recover_plan(json.dumps({"plan": "step", "files_to_modify": []}))

    assert excinfo.value.field == "plan"


def test_file_entry_without_path_is_rejected():
    payload = {"plan": [], "files_to_modify": [{"newContent": "x"}]}

    with pytest.raises(SchemaInvalidError) as excinfo:
        recover_plan(json.dumps(payload))

    assert excinfo.value.field == "files_to_modify"


def test_malformed_commands_are_ignored():
    plan = recover_plan(json.dumps({"plan": [], "files_to_modify": [], "commands_to_run": "npm i"}))

    assert plan.commands_to_run == []


def test_commands_default_to_empty():
    assert recover_plan('{"plan": [], "files_to_modify": []}').commands_to_run == []


def test_helpers():
    assert strip_code_fences("```json\n{}\n```") == "{}"
    assert find_balanced_object('noise {"a": "}"} tail {"b": 1}') == '{"a": "}"}'
    assert find_balanced_object("{ unbalanced") is None
