"""Pipeline Engine: one executor enforcing validate -> guard -> atomic write -> validate -> notify.

Invariants:
    - Identity resolved first: missing acting user -> AuthenticationRequiredError, nothing else runs
    - Input validated before any pre-check; failure -> InvalidInputError
    - Pre-checks run in order; the first failure aborts, no later check, no mutation
    - Exactly ONE store.call_procedure per execution; any failure -> MutationFailedError,
      no post-effects
    - Procedure result validated against the result schema; failure -> MalformedResultError
    - Post-effects never change the outcome: each is isolated, later effects still run
    - asyncio.CancelledError is never caught: cancelling before commit aborts the write,
      cancelling after commit cannot undo it

Design Decisions:
    - Pipelines are data (frozen dataclass of checks + mutation spec + effects); a single
      execute() owns the five-step contract
    - No retries anywhere: retry is a caller policy
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ValidationError

from tradehub.core.errors import (
    AuthenticationRequiredError,
    ErrorContext,
    InvalidInputError,
    MalformedResultError,
    MutationFailedError,
    TradeHubError,
)
from tradehub.core.repository_protocols import NotificationDispatcher, TradeStore
from tradehub.pipelines.isolation import fire_and_forget, run_isolated

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Per-request context supplied by the RPC layer."""
    acting_user_id: UUID | None
    store: TradeStore
    notifier: NotificationDispatcher | None = None
    background_effects: bool = False

    @property
    def user_id(self) -> UUID:
        """Acting user; only valid after execute() resolved identity."""
        if self.acting_user_id is None:
            raise AuthenticationRequiredError()
        return self.acting_user_id


@dataclass(frozen=True)
class PreCheck:
    """Read-only guard. Raises to abort the pipeline."""
    name: str
    run: Callable[[Any, PipelineContext], Awaitable[None]]


@dataclass(frozen=True)
class PostEffect:
    """Best-effort side effect run after commit."""
    name: str
    run: Callable[[Any, Any, PipelineContext], Awaitable[None]]


@dataclass(frozen=True)
class MutationSpec:
    """The single atomic procedure a pipeline commits through."""
    procedure: str
    map_params: Callable[[Any, PipelineContext], dict[str, Any]]
    result_schema: type[BaseModel]


def _error_fields(exc: ValidationError) -> tuple[list[str], list[dict]]:
    fields: list[str] = []
    details: list[dict] = []
    for err in exc.errors():
        path = ".".join(str(loc) for loc in err["loc"]) or "payload"
        if path not in fields:
            fields.append(path)
        details.append({"field": path, "message": err["msg"], "type": err["type"]})
    return fields, details


@dataclass(frozen=True)
class Pipeline:
    """A named trade mutation: pre-checks, one procedure, post-effects."""
    name: str
    description: str
    input_schema: type[BaseModel]
    mutation: MutationSpec
    pre_checks: tuple[PreCheck, ...] = field(default_factory=tuple)
    post_effects: tuple[PostEffect, ...] = field(default_factory=tuple)

    async def execute(self, raw_input: object, context: PipelineContext) -> BaseModel:
        if context.acting_user_id is None:
            logger.warning(
                f"Pipeline {self.name} rejected: no acting user",
                extra={"pipeline": self.name, "error_code": "AUTHENTICATION_REQUIRED"},
            )
            raise AuthenticationRequiredError(ErrorContext(pipeline=self.name))

        log_extra = {"pipeline": self.name, "user_id": str(context.acting_user_id)}

        input_data = self._validate_input(raw_input, log_extra)
        await self._run_pre_checks(input_data, context, log_extra)
        raw_result = await self._call_mutation(input_data, context, log_extra)
        result = self._validate_result(raw_result, log_extra)

        logger.info(
            f"Pipeline {self.name} committed via {self.mutation.procedure}",
            extra={**log_extra, "procedure": self.mutation.procedure},
        )
        await self._run_post_effects(input_data, result, context, log_extra)
        return result

    # ─── Steps ───────────────────────────────────────────────────

    def _validate_input(self, raw_input: object, log_extra: dict) -> BaseModel:
        try:
            return self.input_schema.model_validate(raw_input)
        except ValidationError as e:
            fields, details = _error_fields(e)
            logger.warning(
                f"Pipeline {self.name} invalid input: {fields}",
                extra={**log_extra, "error_code": "INVALID_INPUT"},
            )
            raise InvalidInputError(
                fields, details, ErrorContext(pipeline=self.name),
            ) from e

    async def _run_pre_checks(
        self, input_data: BaseModel, context: PipelineContext, log_extra: dict,
    ) -> None:
        for check in self.pre_checks:
            try:
                await check.run(input_data, context)
            except TradeHubError as e:
                e.context.pipeline = self.name
                logger.warning(
                    f"Pipeline {self.name} pre-check {check.name} failed: {e.message}",
                    extra={**log_extra, "pre_check": check.name, "error_code": e.code},
                )
                raise

    async def _call_mutation(
        self, input_data: BaseModel, context: PipelineContext, log_extra: dict,
    ) -> object:
        procedure = self.mutation.procedure
        params = self.mutation.map_params(input_data, context)
        try:
            return await context.store.call_procedure(procedure, params)
        except TradeHubError as e:
            logger.warning(
                f"Pipeline {self.name} mutation {procedure} rejected: {e.message}",
                extra={**log_extra, "procedure": procedure, "error_code": e.code},
            )
            raise MutationFailedError(
                self.name, procedure, e.message, ErrorContext(pipeline=self.name),
            ) from e
        except Exception as e:
            logger.error(
                f"Pipeline {self.name} mutation {procedure} errored: {e}",
                exc_info=True,
                extra={**log_extra, "procedure": procedure, "error_code": "MUTATION_FAILED"},
            )
            raise MutationFailedError(
                self.name, procedure, str(e) or type(e).__name__,
                ErrorContext(pipeline=self.name),
            ) from e

    def _validate_result(self, raw_result: object, log_extra: dict) -> BaseModel:
        try:
            return self.mutation.result_schema.model_validate(raw_result)
        except ValidationError as e:
            fields, _ = _error_fields(e)
            logger.error(
                f"Pipeline {self.name} malformed result from "
                f"{self.mutation.procedure}: {fields}",
                exc_info=True,
                extra={**log_extra, "procedure": self.mutation.procedure,
                       "error_code": "MALFORMED_RESULT"},
            )
            raise MalformedResultError(
                self.name, fields, ErrorContext(pipeline=self.name),
            ) from e

    async def _run_post_effects(
        self, input_data: BaseModel, result: BaseModel,
        context: PipelineContext, log_extra: dict,
    ) -> None:
        if not self.post_effects:
            return

        async def run_all() -> None:
            for effect in self.post_effects:
                await run_isolated(
                    f"Pipeline {self.name} post-effect {effect.name}",
                    lambda effect=effect: effect.run(input_data, result, context),
                    **log_extra, post_effect=effect.name,
                )

        if context.background_effects:
            fire_and_forget(f"Pipeline {self.name} post-effects", run_all, **log_extra)
        else:
            await run_all()
