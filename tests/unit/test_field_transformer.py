"""Tests for variable expansion, quote escaping and field selection."""

import logging

import pytest

from tests.utils.fake_tracker import make_work_item
from wiclone.field_transformer import (
    CORE_FIELDS,
    DEFAULT_EXTRA_FIELDS,
    FieldTransformer,
    escape_quotes,
    expand_variables,
)


@pytest.mark.unit
class TestEscapeQuotes:
    def test_escapes_double_quote(self) -> None:
        assert escape_quotes('a"b') == 'a\\"b'

    def test_escapes_html_quote_entity(self) -> None:
        assert escape_quotes("a&quot;b") == 'a\\"b'

    def test_mixed_quotes(self) -> None:
        assert escape_quotes('"x" &quot;y&quot;') == '\\"x\\" \\"y\\"'

    def test_not_idempotent(self) -> None:
        once = escape_quotes('say "hi"')
        assert once == 'say \\"hi\\"'
        assert escape_quotes(once) == 'say \\\\"hi\\\\"'

    def test_none_and_plain_text(self) -> None:
        assert escape_quotes(None) is None
        assert escape_quotes("") == ""
        assert escape_quotes("it's fine") == "it's fine"


@pytest.mark.unit
class TestExpandVariables:
    def test_unresolved_token_left_literal_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wiclone"):
            assert expand_variables("Hello {{Name}}", {}) == "Hello {{Name}}"
        assert "{{Name}}" in caplog.text

    def test_replaces_all_occurrences(self) -> None:
        assert expand_variables("{{X}}-{{X}}", {"X": "Q"}) == "Q-Q"

    def test_multiple_distinct_tokens(self) -> None:
        text = "{{Team}} sprint {{Sprint}} for {{Team}}"
        assert expand_variables(text, {"Team": "Blue", "Sprint": "42"}) == "Blue sprint 42 for Blue"

    def test_replacement_values_are_not_rescanned(self) -> None:
        variables = {"A": "{{B}}", "B": "nope"}
        assert expand_variables("{{A}} {{B}}", variables) == "{{B}} nope"

    def test_tokens_need_word_characters(self) -> None:
        text = "{{}} {{with space}} {Single} {{ok_1}}"
        assert expand_variables(text, {"ok_1": "yes"}) == "{{}} {{with space}} {Single} yes"

    def test_empty_and_none_input(self) -> None:
        assert expand_variables(None, {"X": "1"}) is None
        assert expand_variables("", {"X": "1"}) == ""

    def test_no_map_behaves_like_empty_map(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wiclone"):
            assert expand_variables("{{A}} and {{B}}", None) == "{{A}} and {{B}}"
        assert "{{A}}" in caplog.text
        assert "{{B}}" in caplog.text

    def test_on_unresolved_called_once_per_distinct_token(self) -> None:
        seen: list[str] = []
        expand_variables("{{Gone}} {{Gone}} {{Other}} {{Known}}", {"Known": "k"}, seen.append)
        assert seen == ["{{Gone}}", "{{Other}}"]

    def test_empty_replacement_value(self) -> None:
        assert expand_variables("[{{X}}]", {"X": ""}) == "[]"


@pytest.mark.unit
class TestFieldTransformer:
    def test_create_fields_contain_present_core_fields(self) -> None:
        item = make_work_item(
            7,
            "Title",
            System__Description="Body",
            System__AreaPath="Contoso\\Web",
            System__IterationPath="Contoso\\Sprint 1",
            Microsoft__VSTS__Common__Priority="2",
        )
        fields = FieldTransformer().build_create_fields(item, {})
        assert fields == {
            "System.WorkItemType": "User Story",
            "System.Title": "Title",
            "System.Description": "Body",
            "System.AreaPath": "Contoso\\Web",
            "System.IterationPath": "Contoso\\Sprint 1",
            "System.TeamProject": "Contoso",
            "Microsoft.VSTS.Common.Priority": "2",
        }
        assert set(fields) <= set(CORE_FIELDS)

    def test_empty_and_missing_core_fields_are_left_out(self) -> None:
        item = make_work_item(7, "Title", System__Description="", System__AreaPath=None)
        fields = FieldTransformer().build_create_fields(item, {})
        assert "System.Description" not in fields
        assert "System.AreaPath" not in fields
        assert "System.IterationPath" not in fields

    def test_title_and_description_are_expanded_then_escaped(self) -> None:
        item = make_work_item(
            7,
            'Release "{{Version}}"',
            System__Description="<p>Ship &quot;{{Version}}&quot;</p>",
        )
        fields = FieldTransformer().build_create_fields(item, {"Version": '2.0 "final"'})
        assert fields["System.Title"] == 'Release \\"2.0 \\"final\\"\\"'
        assert fields["System.Description"] == '<p>Ship \\"2.0 \\"final\\"\\"</p>'

    def test_other_core_fields_are_copied_raw(self) -> None:
        item = make_work_item(7, "T", System__AreaPath='Contoso\\{{Team}} "x"')
        fields = FieldTransformer().build_create_fields(item, {"Team": "Blue"})
        assert fields["System.AreaPath"] == 'Contoso\\{{Team}} "x"'

    def test_escaping_can_be_disabled(self) -> None:
        item = make_work_item(7, 'Say "{{Word}}"')
        fields = FieldTransformer(escape=False).build_create_fields(item, {"Word": "hi"})
        assert fields["System.Title"] == 'Say "hi"'

    def test_extra_updates_skip_empty_fields(self) -> None:
        transformer = FieldTransformer(extra_fields=["StoryPoints"])
        assert list(transformer.build_extra_updates(make_work_item(1, "T", StoryPoints=""), {})) == []
        assert list(transformer.build_extra_updates(make_work_item(1, "T"), {})) == []
        assert list(transformer.build_extra_updates(make_work_item(1, "T", StoryPoints="5"), {})) == [
            ("StoryPoints", "5"),
        ]

    def test_extra_updates_follow_configured_order_and_transform(self) -> None:
        transformer = FieldTransformer(
            extra_fields=["System.Tags", "Microsoft.VSTS.Common.AcceptanceCriteria", "System.Tags"],
        )
        item = make_work_item(
            1,
            "T",
            Microsoft__VSTS__Common__AcceptanceCriteria='Done when "{{Env}}" is green',
            System__Tags="{{Env}}; release",
        )
        assert transformer.extra_fields == ("System.Tags", "Microsoft.VSTS.Common.AcceptanceCriteria")
        assert list(transformer.build_extra_updates(item, {"Env": "prod"})) == [
            ("System.Tags", "prod; release"),
            ("Microsoft.VSTS.Common.AcceptanceCriteria", 'Done when \\"prod\\" is green'),
        ]

    def test_unresolved_tokens_are_collected(self) -> None:
        transformer = FieldTransformer()
        item = make_work_item(1, "{{A}} {{B}}", System__Description="{{A}}")
        transformer.build_create_fields(item, {"B": "b"})
        assert transformer.unresolved_tokens == ["{{A}}"]

    def test_default_extra_fields_include_story_points(self) -> None:
        assert "Microsoft.VSTS.Scheduling.StoryPoints" in DEFAULT_EXTRA_FIELDS
        assert not set(DEFAULT_EXTRA_FIELDS) & set(CORE_FIELDS)
