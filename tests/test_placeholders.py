"""Placeholder scanning, classification and substitution tests"""

import pytest

from promptor.enums import SegmentKind, UnresolvedPolicy
from promptor.placeholders import (
    Resolver,
    check_publishable,
    classify,
    collect_known_refs,
    find_unresolvable,
    iter_placeholders,
    substitute,
)
from promptor.schema import Schema

TEMPLATES = [
    "",
    "no placeholders at all",
    "Hello {{name}}, {{unknown}}!",
    "{{a}}{{b}}{{a}}",
    "{{}} is not a placeholder, {{ spaced ref }} is",
    "unbalanced {{open and } close }}",
    "nested {{{{inner}}}} braces",
    "trailing {{",
]


# ========== Scanning ==========


def test_iter_placeholders_positions():
    found = list(iter_placeholders("Hi {{name}}!"))

    assert len(found) == 1
    assert found[0].ref == "name"
    assert (found[0].start, found[0].end) == (3, 11)
    assert found[0].raw == "{{name}}"


def test_iter_placeholders_takes_ref_verbatim():
    refs = [p.ref for p in iter_placeholders("{{ spaced ref }} {{Name}}")]
    assert refs == [" spaced ref ", "Name"]


def test_iter_placeholders_requires_non_empty_ref():
    assert list(iter_placeholders("{{}}")) == []


# ========== Classification ==========


@pytest.mark.parametrize("template", TEMPLATES)
@pytest.mark.parametrize("known", [set(), {"name", "a"}, {"inner", "b", " spaced ref "}])
def test_classify_reproduces_template(template, known):
    segments = list(classify(template, known))
    assert "".join(segment.text for segment in segments) == template


def test_classify_segments_are_contiguous():
    segments = list(classify("x {{a}} y {{b}}", {"a"}))

    position = 0
    for segment in segments:
        assert segment.start == position
        position = segment.end
    assert position == len("x {{a}} y {{b}}")


def test_classify_scenario():
    segments = list(classify("Hello {{name}}, {{unknown}}!", {"name", "greeting"}))

    kinds = [(segment.kind, segment.ref) for segment in segments]
    assert kinds == [
        (SegmentKind.LITERAL, None),
        (SegmentKind.RESOLVABLE, "name"),
        (SegmentKind.LITERAL, None),
        (SegmentKind.UNRESOLVABLE, "unknown"),
        (SegmentKind.LITERAL, None),
    ]
    assert segments[1].is_placeholder
    assert not segments[0].is_placeholder


def test_classify_is_restartable():
    template = "{{a}} and {{b}}"
    first = list(classify(template, {"a"}))
    second = list(classify(template, {"a"}))
    assert first == second


def test_classify_marks_every_unknown_occurrence():
    segments = list(classify("{{x}} {{x}}", set()))
    unresolvable = [s for s in segments if s.kind == SegmentKind.UNRESOLVABLE]
    assert len(unresolvable) == 2


def test_segment_to_dict():
    segment = list(classify("{{a}}", {"a"}))[0]
    assert segment.to_dict() == {
        "kind": "resolvable",
        "text": "{{a}}",
        "start": 0,
        "end": 5,
        "ref": "a",
    }


# ========== Publishability ==========


def test_check_publishable_scenario():
    check = check_publishable("Hello {{name}}, {{unknown}}!", {"name", "greeting"})
    assert check.publishable is False
    assert check.offending == ["unknown"]


def test_check_publishable_all_known():
    check = check_publishable("{{a}} {{b}}", {"a", "b"})
    assert check.publishable is True
    assert check.offending == []


def test_check_publishable_empty_template():
    assert check_publishable("", set()).publishable is True


def test_find_unresolvable_dedupes_in_first_seen_order():
    assert find_unresolvable("{{z}} {{y}} {{z}} {{k}}", {"k"}) == ["z", "y"]


def test_unresolvable_ref_is_case_sensitive():
    assert find_unresolvable("{{Name}}", {"name"}) == ["Name"]


# ========== Substitution ==========


def test_substitute_scenario_keeps_unknown():
    result = substitute("Hello {{name}}, {{unknown}}!", {"name": "Ada"}, {})
    assert result == "Hello Ada, {{unknown}}!"


def test_substitute_blank_policy():
    result = substitute(
        "Hello {{name}}, {{unknown}}!",
        {"name": "Ada"},
        {},
        unresolved=UnresolvedPolicy.BLANK,
    )
    assert result == "Hello Ada, !"


def test_substitute_falls_through_to_fragment():
    assert substitute("{{note}}", {}, {"note": "Default text"}) == "Default text"


def test_substitute_form_value_wins_over_fragment():
    result = substitute("{{note}}", {"note": "typed"}, {"note": "Default text"})
    assert result == "typed"


def test_substitute_present_empty_value_wins_over_fragment():
    assert substitute("[{{note}}]", {"note": ""}, {"note": "Default"}) == "[]"
    assert substitute("[{{note}}]", {"note": None}, {"note": "Default"}) == "[]"


def test_substitute_coerces_values_to_text():
    assert substitute("{{n}} {{flag}}", {"n": 3, "flag": True}) == "3 True"


@pytest.mark.parametrize("template", ["", "plain text", "{ single } braces", "{{}}"])
def test_substitute_without_placeholders_is_identity(template):
    assert substitute(template, {"a": "x"}, {"b": "y"}) == template


def test_substitute_does_not_rescan_inserted_values():
    result = substitute("{{a}}", {"a": "{{b}}", "b": "nope"})
    assert result == "{{b}}"


def test_substitute_fragment_placeholders_are_not_expanded():
    result = substitute("{{sig}}", {"name": "Ada"}, {"sig": "-- {{name}}"})
    assert result == "-- {{name}}"


def test_substitute_repeated_ref():
    assert substitute("{{a}}-{{a}}", {"a": "x"}) == "x-x"


# ========== Resolver ==========


@pytest.fixture
def schema():
    return Schema.model_validate(
        {
            "template": "Dear {{name}},\n{{body}}\n{{sig}}",
            "fragments": {"sig": "Regards"},
            "ui": {
                "main": {
                    "components": [
                        {"type": "textinput", "label": "Name", "required": True},
                        {"type": "textarea", "label": "Body"},
                    ]
                }
            },
        }
    )


def test_collect_known_refs(schema):
    assert collect_known_refs(schema) == {"name", "body", "sig"}


def test_resolver_render_uses_schema_fragments(schema):
    resolver = Resolver(schema)
    result = resolver.render({"name": "Ada", "body": "Thanks."})
    assert result == "Dear Ada,\nThanks.\nRegards"


def test_resolver_render_with_fragment_override(schema):
    resolver = Resolver(schema)
    result = resolver.render({"name": "Ada"}, fragments={"sig": "Bye"})
    assert result == "Dear Ada,\n{{body}}\nBye"


def test_resolver_checks_other_templates(schema):
    resolver = Resolver(schema, UnresolvedPolicy.BLANK)

    assert resolver.check_publishable().publishable is True
    assert resolver.check_publishable("{{nope}}").offending == ["nope"]
    assert resolver.render({}) == "Dear ,\n\nRegards"
    assert [s.kind for s in resolver.classify("{{sig}}")] == [SegmentKind.RESOLVABLE]
