from dataclasses import FrozenInstanceError

import pytest

from testsuites.ui_testing.framework.descriptors import ElementDescriptor, Strategy, StrategyKind, bind_template
from testsuites.ui_testing.framework.errors import MissingParameterError, TemplateError


def test_strategies_are_ordered_by_priority():
    descriptor = ElementDescriptor.of(
        css=[".btn-login", "#login"],
        text="Login",
        role="button",
        name="Login",
        test_id="login-button",
    )

    kinds = [s.kind for s in descriptor.ordered]
    assert kinds == [
        StrategyKind.TEST_ID,
        StrategyKind.ROLE,
        StrategyKind.TEXT,
        StrategyKind.CSS,
        StrategyKind.CSS,
    ]
    # CSS fallbacks keep their declared order
    assert [s.value for s in descriptor.ordered[3:]] == [".btn-login", "#login"]
    assert descriptor.primary == Strategy(StrategyKind.TEST_ID, "login-button")


def test_descriptor_requires_a_strategy():
    with pytest.raises(ValueError):
        ElementDescriptor.of(label="nothing")


def test_descriptor_is_immutable():
    descriptor = ElementDescriptor.of(text="Login")
    with pytest.raises(FrozenInstanceError):
        descriptor.exact = True


def test_bind_substitutes_placeholders_without_mutating_definition():
    descriptor = ElementDescriptor.of(text="{pickup_exact}", exact=True, label="pickup {pickup_exact}")

    bound = descriptor.bind({"pickup_exact": "Festac Town"})

    assert bound.ordered[0].value == "Festac Town"
    assert bound.label == "pickup Festac Town"
    assert bound.exact is True
    assert descriptor.ordered[0].value == "{pickup_exact}"


def test_bind_reports_missing_parameters():
    descriptor = ElementDescriptor.of(role="button", name="Book {trip_id}")

    with pytest.raises(MissingParameterError) as exc_info:
        descriptor.bind({})

    assert exc_info.value.missing == ["trip_id"]


def test_display_name_falls_back_to_primary_strategy():
    assert str(ElementDescriptor.of(role="textbox", name="Email Address")) == "role=textbox[name='Email Address']"
    assert ElementDescriptor.of(test_id="x", label="email_input").display_name == "email_input"


def test_bind_keeps_escaped_braces_literal():
    template = "input[data-state='{{open}}'][name='{field}']"

    assert bind_template(template, {"field": "email"}) == "input[data-state='{open}'][name='email']"
    assert bind_template("{{}}", {}) == "{}"


@pytest.mark.parametrize("template", ["a}b", "a{b", "{}", "{0}", "Book {}"])
def test_bind_rejects_malformed_templates(template):
    with pytest.raises(TemplateError) as exc_info:
        bind_template(template, {"b": "x"})

    assert exc_info.value.template == template
    assert "'{{'" in str(exc_info.value)


def test_malformed_template_surfaces_when_descriptor_is_bound():
    descriptor = ElementDescriptor.of(css=["div.card:has-text('{trip_id}')", "div[style='{']"])

    with pytest.raises(TemplateError):
        descriptor.bind({"trip_id": "FST2000"})
