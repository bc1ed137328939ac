import asyncio

import pytest

from testsuites.ui_testing.framework.assertion_gate import UrlMatches
from testsuites.ui_testing.framework.descriptors import ElementDescriptor
from testsuites.ui_testing.framework.element_actions import Action
from testsuites.ui_testing.framework.errors import (
    ActionError,
    FlowError,
    FlowStateError,
    GateTimeoutError,
    MissingParameterError,
    SessionBusyError,
    SessionStateError,
    TemplateError,
)
from testsuites.ui_testing.framework.flow import (
    Expect,
    FlowRun,
    FlowState,
    FlowStep,
    FlowTimeouts,
    Interaction,
    Navigate,
    chain,
    run_flow,
)
from testsuites.ui_testing.framework.session import SessionState
from testsuites.unit.fakes import FakeElement, FakePage


EMAIL = ElementDescriptor.of(role="textbox", name="Email", label="email_input")
PASSWORD = ElementDescriptor.of(role="textbox", name="Password", label="password_input")
LOGIN_BUTTON = ElementDescriptor.of(test_id="login-button", label="login_button")

LOGIN = FlowStep(
    name="login",
    steps=(
        Interaction(EMAIL, Action.FILL, "{email}"),
        Interaction(PASSWORD, Action.FILL, "{password}"),
        Interaction(LOGIN_BUTTON, Action.CLICK),
        Expect(UrlMatches("dashboard")),
    ),
)


def login_page(accepted_email: str = "a@example.com", **button) -> FakePage:
    email = FakeElement(tag="input", role="textbox", name="Email")
    password = FakeElement(tag="input", role="textbox", name="Password")

    def submit(page: FakePage) -> None:
        if email.value == accepted_email:
            page.url = f"https://app.test/dashboard?user={email.value}"

    return FakePage(url="https://app.test/login").add(
        email,
        password,
        FakeElement(tag="button", test_id="login-button", on_click=submit, **button),
    )


@pytest.mark.asyncio
async def test_flow_returns_same_session_and_records_success(make_session, fast_timeouts):
    session = make_session(login_page())

    result = await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)

    assert result is session
    assert session.is_active
    assert [r.success for r in session.history] == [True]
    assert session.history[0].flow_name == "login"


@pytest.mark.asyncio
async def test_failing_click_aborts_before_gate(make_session, fast_timeouts):
    page = login_page(enabled=False)
    session = make_session(page)

    with pytest.raises(FlowError) as exc_info:
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)

    error = exc_info.value
    assert error.step_index == 2
    assert isinstance(error.cause, ActionError)
    # The URL gate was never attempted
    assert page.url == "https://app.test/login"
    assert session.state is SessionState.FAILED
    result = session.history[-1]
    assert not result.success
    assert result.step_index == 2
    assert result.last_attempted == "testid=login-button"


@pytest.mark.asyncio
async def test_partial_side_effects_are_not_rolled_back(make_session, fast_timeouts):
    page = login_page(enabled=False)
    session = make_session(page)

    with pytest.raises(FlowError):
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)

    assert page.elements[0].value == "a@example.com"


@pytest.mark.asyncio
async def test_gate_failure_is_wrapped(make_session, fast_timeouts):
    session = make_session(login_page(accepted_email="someone-else@example.com"))

    with pytest.raises(FlowError) as exc_info:
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)

    assert exc_info.value.step_index == 3
    assert isinstance(exc_info.value.cause, GateTimeoutError)


@pytest.mark.asyncio
async def test_missing_parameter_fails_its_step(make_session, fast_timeouts):
    session = make_session(login_page())

    with pytest.raises(FlowError) as exc_info:
        await run_flow(session, LOGIN, {"email": "a@example.com"}, fast_timeouts)

    assert exc_info.value.step_index == 1
    assert isinstance(exc_info.value.cause, MissingParameterError)


@pytest.mark.asyncio
async def test_post_condition_runs_as_last_step(make_session, fast_timeouts):
    flow = FlowStep(
        name="open",
        steps=(Navigate("{base}/start"),),
        post_condition=UrlMatches("/never"),
    )
    session = make_session()

    with pytest.raises(FlowError) as exc_info:
        await run_flow(session, flow, {"base": "https://app.test"}, fast_timeouts)

    assert exc_info.value.step_index == 1
    assert exc_info.value.step_name == "post-condition"
    assert session.page.visited == ["https://app.test/start"]


@pytest.mark.asyncio
async def test_outcome_is_repeatable_on_fresh_sessions(make_session, fast_timeouts):
    outcomes = []
    for _ in range(2):
        session = make_session(login_page(enabled=False))
        try:
            await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)
            outcomes.append(("ok", None))
        except FlowError as e:
            outcomes.append(("failed", e.step_index))

    assert outcomes == [("failed", 2), ("failed", 2)]


@pytest.mark.asyncio
async def test_concurrent_sessions_are_isolated(make_session, fast_timeouts):
    page_a = login_page(accepted_email="a@example.com")
    page_b = login_page(accepted_email="b@example.com")
    session_a = make_session(page_a, name="a")
    session_b = make_session(page_b, name="b")

    await asyncio.gather(
        run_flow(session_a, LOGIN, {"email": "a@example.com", "password": "pa"}, fast_timeouts),
        run_flow(session_b, LOGIN, {"email": "b@example.com", "password": "pb"}, fast_timeouts),
    )

    assert page_a.url.endswith("user=a@example.com")
    assert page_b.url.endswith("user=b@example.com")
    assert [e.value for e in page_a.elements[:2]] == ["a@example.com", "pa"]
    assert [e.value for e in page_b.elements[:2]] == ["b@example.com", "pb"]


@pytest.mark.asyncio
async def test_second_flow_on_busy_session_is_rejected(make_session, fast_timeouts):
    page = login_page()
    page.elements[0].appear_after = 0.1
    session = make_session(page)

    first = asyncio.create_task(
        run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)
    )
    await asyncio.sleep(0.02)
    with pytest.raises(SessionBusyError):
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)

    assert await first is session


@pytest.mark.asyncio
async def test_failed_session_refuses_further_flows(make_session, fast_timeouts):
    session = make_session(login_page(enabled=False))
    with pytest.raises(FlowError):
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)

    with pytest.raises(SessionStateError):
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)


@pytest.mark.asyncio
async def test_flow_run_state_machine(make_session, fast_timeouts):
    run = FlowRun(LOGIN, {"email": "a@example.com", "password": "pw"}, fast_timeouts)
    assert run.state is FlowState.NOT_STARTED

    await run.execute(make_session(login_page()))
    assert run.state is FlowState.COMPLETED

    with pytest.raises(FlowStateError):
        await run.execute(make_session(login_page()))


@pytest.mark.asyncio
async def test_overall_timeout_fails_and_releases_session(make_session):
    page = login_page()
    page.elements[0].appear_after = 10
    session = make_session(page)

    with pytest.raises(FlowError) as exc_info:
        await run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}, timeout=0.1)

    assert exc_info.value.step_index == 0
    assert isinstance(exc_info.value.cause, asyncio.TimeoutError)
    assert session.state is SessionState.CLOSED
    assert page.closed
    assert session.history[-1].success is False


@pytest.mark.asyncio
async def test_external_cancellation_releases_session(make_session):
    page = login_page()
    page.elements[0].appear_after = 10
    session = make_session(page)

    task = asyncio.create_task(run_flow(session, LOGIN, {"email": "a@example.com", "password": "pw"}))
    await asyncio.sleep(0.05)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert session.state is SessionState.CLOSED
    assert page.closed


@pytest.mark.asyncio
async def test_chain_composes_flows(make_session, fast_timeouts):
    goto = FlowStep(name="goto", steps=(Navigate("https://app.test/login"),))
    session = make_session(login_page())

    result = await chain(
        session,
        goto.bind(),
        LOGIN.bind(email="a@example.com", password="pw"),
        timeouts=fast_timeouts,
    )

    assert result is session
    assert [r.flow_name for r in session.history] == ["goto", "login"]


@pytest.mark.asyncio
async def test_chain_stops_at_first_failure(make_session, fast_timeouts):
    goto = FlowStep(name="goto", steps=(Navigate("https://app.test/login"),))
    session = make_session(login_page(enabled=False))

    with pytest.raises(FlowError) as exc_info:
        await chain(
            session,
            LOGIN.bind(email="a@example.com", password="pw"),
            goto.bind(),
            timeouts=fast_timeouts,
        )

    assert exc_info.value.flow_name == "login"
    assert session.page.visited == []


@pytest.mark.asyncio
async def test_chain_applies_overall_timeout_to_each_flow(make_session):
    goto = FlowStep(name="goto", steps=(Navigate("https://app.test/login"),))
    page = login_page()
    page.elements[0].appear_after = 10
    session = make_session(page)
    slow = FlowTimeouts(resolve=5.0, action=5.0, gate=5.0, interval=0.01)

    with pytest.raises(FlowError) as exc_info:
        await chain(
            session,
            goto.bind(),
            LOGIN.bind(email="a@example.com", password="pw"),
            timeouts=slow,
            timeout=0.1,
        )

    assert exc_info.value.flow_name == "login"
    assert isinstance(exc_info.value.cause, asyncio.TimeoutError)
    assert session.state is SessionState.CLOSED
    assert [r.success for r in session.history] == [True, False]


@pytest.mark.asyncio
async def test_malformed_template_fails_the_step(make_session, fast_timeouts):
    broken = FlowStep(
        name="broken",
        steps=(Interaction(ElementDescriptor.of(css=["input[value='}']"]), Action.CLICK),),
    )
    session = make_session(login_page())

    with pytest.raises(FlowError) as exc_info:
        await run_flow(session, broken, {}, timeouts=fast_timeouts)

    assert exc_info.value.step_index == 0
    assert isinstance(exc_info.value.cause, TemplateError)
    assert session.page.actions == []
