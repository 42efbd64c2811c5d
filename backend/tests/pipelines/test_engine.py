"""Pipeline Engine: tests for the validate -> guard -> mutate -> validate -> notify contract.

Tests cover:
    - Missing acting user -> AuthenticationRequiredError, nothing else runs
    - Invalid input -> InvalidInputError with field names, no pre-check runs
    - First failing pre-check short-circuits later checks and the mutation
    - Procedure failure (domain or unexpected) -> MutationFailedError, no post-effects
    - Malformed procedure result -> MalformedResultError, no post-effects
    - Post-effect failures never change the result; later effects still run
    - background_effects schedules effects without awaiting them
"""

from uuid import uuid4

import pytest
from pydantic import BaseModel

from tradehub.core.errors import (
    AuthenticationRequiredError,
    InvalidInputError,
    MalformedResultError,
    MutationFailedError,
    NotFoundError,
    ProcedureRejectedError,
)
from tradehub.pipelines.engine import MutationSpec, Pipeline, PostEffect, PreCheck
from tradehub.pipelines.isolation import drain_background_tasks
from tradehub.schemas.pipelines import CompleteMeetupInput, CompleteMeetupResult
from tests.fakes import FakeTradeStore, make_context


class _Recorder:
    def __init__(self):
        self.events: list[str] = []

    def check(self, name: str, fail: Exception | None = None) -> PreCheck:
        async def run(input_data, context):
            self.events.append(f"check:{name}")
            if fail is not None:
                raise fail
        return PreCheck(name, run)

    def effect(self, name: str, fail: bool = False) -> PostEffect:
        async def run(input_data, result, context):
            self.events.append(f"effect:{name}")
            if fail:
                raise RuntimeError(f"{name} exploded")
        return PostEffect(name, run)


def _pipeline(pre_checks=(), post_effects=(), result_schema: type[BaseModel] = CompleteMeetupResult):
    return Pipeline(
        name="testPipeline",
        description="test",
        input_schema=CompleteMeetupInput,
        pre_checks=tuple(pre_checks),
        mutation=MutationSpec(
            procedure="test_v1",
            map_params=lambda input_data, ctx: {
                "p_meetup_id": input_data.meetup_id, "p_user_id": ctx.user_id,
            },
            result_schema=result_schema,
        ),
        post_effects=tuple(post_effects),
    )


@pytest.fixture
def store():
    s = FakeTradeStore()
    s.procedure_results["test_v1"] = {"meetup_id": uuid4(), "both_completed": False}
    return s


# ─── Identity + input ────────────────────────────────────────────

async def test_missing_user_rejected_before_anything(store):
    rec = _Recorder()
    pipeline = _pipeline(pre_checks=[rec.check("a")])
    with pytest.raises(AuthenticationRequiredError) as exc_info:
        await pipeline.execute({"meetupId": str(uuid4())}, make_context(store, None))
    assert exc_info.value.context.pipeline == "testPipeline"
    assert rec.events == []
    assert store.calls == []


async def test_invalid_input_names_fields(store):
    rec = _Recorder()
    pipeline = _pipeline(pre_checks=[rec.check("a")])
    with pytest.raises(InvalidInputError) as exc_info:
        await pipeline.execute({"meetupId": "not-a-uuid"}, make_context(store, uuid4()))
    assert exc_info.value.fields == ["meetupId"]
    assert rec.events == []
    assert store.calls == []


async def test_unknown_fields_rejected(store):
    pipeline = _pipeline()
    with pytest.raises(InvalidInputError):
        await pipeline.execute(
            {"meetupId": str(uuid4()), "extra": 1}, make_context(store, uuid4()),
        )


async def test_non_mapping_input_rejected(store):
    with pytest.raises(InvalidInputError):
        await _pipeline().execute(None, make_context(store, uuid4()))


# ─── Pre-checks ──────────────────────────────────────────────────

async def test_first_failing_check_short_circuits(store):
    rec = _Recorder()
    pipeline = _pipeline(pre_checks=[
        rec.check("a"),
        rec.check("b", fail=NotFoundError("Meetup", "x")),
        rec.check("c"),
    ], post_effects=[rec.effect("e")])

    with pytest.raises(NotFoundError) as exc_info:
        await pipeline.execute({"meetupId": str(uuid4())}, make_context(store, uuid4()))

    assert rec.events == ["check:a", "check:b"]
    assert store.calls == []
    assert exc_info.value.context.pipeline == "testPipeline"


async def test_checks_run_in_order_then_single_mutation(store):
    rec = _Recorder()
    user = uuid4()
    meetup_id = uuid4()
    pipeline = _pipeline(pre_checks=[rec.check("a"), rec.check("b")])

    result = await pipeline.execute({"meetup_id": str(meetup_id)}, make_context(store, user))

    assert rec.events == ["check:a", "check:b"]
    assert store.calls == [("test_v1", {"p_meetup_id": meetup_id, "p_user_id": user})]
    assert isinstance(result, CompleteMeetupResult)


# ─── Mutation ────────────────────────────────────────────────────

async def test_procedure_rejection_becomes_mutation_failed(store):
    rec = _Recorder()
    store.procedure_errors["test_v1"] = ProcedureRejectedError("test_v1", "stale")
    pipeline = _pipeline(post_effects=[rec.effect("e")])

    with pytest.raises(MutationFailedError) as exc_info:
        await pipeline.execute({"meetupId": str(uuid4())}, make_context(store, uuid4()))

    assert exc_info.value.procedure == "test_v1"
    assert "stale" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, ProcedureRejectedError)
    assert rec.events == []


async def test_unexpected_procedure_error_becomes_mutation_failed(store):
    store.procedure_errors["test_v1"] = ConnectionResetError("socket closed")
    with pytest.raises(MutationFailedError):
        await _pipeline().execute({"meetupId": str(uuid4())}, make_context(store, uuid4()))


async def test_malformed_result_rejected(store):
    rec = _Recorder()
    store.procedure_results["test_v1"] = {"meetup_id": "nope"}
    pipeline = _pipeline(post_effects=[rec.effect("e")])

    with pytest.raises(MalformedResultError) as exc_info:
        await pipeline.execute({"meetupId": str(uuid4())}, make_context(store, uuid4()))

    assert "both_completed" in exc_info.value.data["fields"]
    assert rec.events == []


# ─── Post-effects ────────────────────────────────────────────────

async def test_failing_effect_does_not_change_result(store):
    rec = _Recorder()
    pipeline = _pipeline(post_effects=[
        rec.effect("first", fail=True), rec.effect("second"),
    ])

    result = await pipeline.execute({"meetupId": str(uuid4())}, make_context(store, uuid4()))

    assert result.both_completed is False
    assert rec.events == ["effect:first", "effect:second"]


async def test_background_effects_are_scheduled(store):
    rec = _Recorder()
    pipeline = _pipeline(post_effects=[rec.effect("late")])
    ctx = make_context(store, uuid4(), background_effects=True)

    await pipeline.execute({"meetupId": str(uuid4())}, ctx)
    await drain_background_tasks()

    assert rec.events == ["effect:late"]
